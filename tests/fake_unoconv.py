"""Stand-in for the unoconv executable used by the test suite.

Behaviour is driven by the input file name:
  *fail*        writes a diagnostic to stderr
  *hang*        sleeps well past any test timeout
  *empty*       exits cleanly without producing output
otherwise the output file (or stdout) receives the JSON-encoded argv.
"""

import json
import os
import sys
import time
from pathlib import Path

HELP = """\
unoconv: you have to provide a filename or url as argument
Try `unoconv -h' for more information.

Usage: unoconv [options] file [file2 ..]
Convert from and to any format supported by LibreOffice

unoconv options:
  -c, --connection=string  use a custom connection string
  -d, --doctype=type       specify document type
                             (document, graphics, presentation, spreadsheet)
  -e, --export=name=value  set export filter options
                             eg. -e PageRange=1-2
  -f, --format=format      specify the output format
  -F, --field=name=value   replace user-defined text field with value
                             eg. -F Client_Name="Oracle"
  -i, --import=string      set import filter option string
                             eg. -i utf8
  -I, --input-filter-name=string  force input filter name
  -l, --listener           start a permanent listener to use by unoconv clients
  -n, --no-launch          fail if no listener is found (default: launch one)
  -o, --output=name        output basename, filename or directory
      --pipe=name          alternative method of connection using a pipe
  -p, --port=port          specify the port (default: 2002)
      --password=string    provide a password to decrypt the document
      --preserve           keep timestamp and permissions of the original document
  -s, --server=server      specify the server address (default: 127.0.0.1)
      --show               list the available output formats
      --stdin              read from stdin (filename not required)
      --stdout             write output to stdout
  -t, --template=file      import the styles from template (.ott)
  -T, --timeout=secs       timeout after secs if connection to listener fails
  -v, --verbose            be more and more verbose (-vvv for debugging)
      --version            display version number of unoconv, OOo/LO and platform details
      --filter=name        use a specific export filter
"""


def main(argv: list[str]) -> int:
    if argv == ["--help"]:
        sys.stderr.write(HELP)
        return 0
    if argv == ["--listener"]:
        time.sleep(60)
        return 0

    input_name = Path(argv[-1]).name
    payload = json.dumps(argv)

    if "hang" in input_name:
        time.sleep(30)
        return 0
    if "fail" in input_name:
        if "--stdout" in argv:
            sys.stdout.write("partial ")
            sys.stdout.flush()
        sys.stderr.write("Error: Unable to connect or start own listener. Aborting.\n")
        return 1
    if "empty" in input_name:
        return 0

    if "--stdout" in argv:
        sys.stdout.write("converted: " + payload)
        return 0

    # the last --output wins, as with getopt in the real converter
    last = len(argv) - 1 - argv[::-1].index("--output")
    output = Path(argv[last + 1])
    output.write_text(payload, encoding="utf-8")
    if output.suffix == ".html":
        (output.parent / f"{output.stem}_html_1.png").write_bytes(b"\x89PNG fake")
    if "--preserve" in argv:
        # keep the (very old) timestamp of the original document
        os.utime(output, (0, 0))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
