from pathlib import Path

import pytest

from unoconv_service.conversion import ConversionRunner, ConverterService
from unoconv_service.errors import InvalidOption


@pytest.fixture
async def service(fake_command, tmp_path, reaper):
    svc = await ConverterService.create(fake_command, start_listener=False)
    # swap in a runner that writes under tmp_path and never touches real processes
    runner = ConversionRunner(fake_command, tmp_dir=str(tmp_path / "out"), reaper=reaper)
    return ConverterService(svc.catalog, runner, command=fake_command)


async def test_help_text_comes_from_catalog(service):
    assert "converter options:" in service.help_text
    assert "/format/<value>" in service.help_text


async def test_convert_command_string(service, make_input, tmp_path):
    result = await service.convert(make_input("letter.doc"), "format/docx")
    assert result == str(tmp_path / "out" / "letter.docx")
    assert Path(result).exists()


async def test_invalid_command_never_spawns(service, make_input, reaper):
    source = make_input("letter.doc")
    with pytest.raises(InvalidOption):
        await service.convert(source, "format/pdf/bogus/1")
    assert reaper.calls == 0
    assert Path(source).exists()


async def test_stream_through_service(service, make_input):
    stream = await service.convert_to_stream(make_input("letter.doc"), "format/txt")
    text = await stream.read()
    assert text.startswith("converted: ")


async def test_start_and_stop_without_listener(service):
    service.start()
    service.stop()
