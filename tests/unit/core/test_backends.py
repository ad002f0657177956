"""Tests for appicons/backends.py"""

from pathlib import Path
from unittest.mock import Mock, patch

import pytest
from PIL import Image

from appicons.backends import (
    DEFAULT_RENDER_HELPER, NO_ICON_REASON, ChainedRenderer, ConversionBackend, FileConversion,
    HelperRenderer, PillowIcnsConverter, QuickLookRenderer, RenderExtraction, SipsConverter,
    probe_dimensions, read_png
)
from appicons.errors import ConversionFailure, ExtractionError, RenderFailure, ResolutionAbsent
from appicons.models import ApplicationBundle, ExtractionMethod, Found, NotFound


def icns_container(*blocks) -> bytes:
    """Assemble an icns file from (type, payload) blocks"""
    body = b''.join(
        kind + (len(payload) + 8).to_bytes(4, 'big') + payload for kind, payload in blocks
    )
    return b'icns' + (len(body) + 8).to_bytes(4, 'big') + body


@pytest.fixture
def bundle(apps_root, make_bundle):
    return ApplicationBundle.from_path(make_bundle(apps_root, 'Sample.app'))


class TestImageHelpers:

    def test_probe_dimensions(self, tmp_path, png_bytes):
        path = tmp_path / 'icon.png'
        path.write_bytes(png_bytes((300, 200)))
        assert probe_dimensions(path) == (300, 200)

    def test_probe_dimensions_undecodable(self, tmp_path):
        path = tmp_path / 'icon.png'
        path.write_bytes(b'garbage')
        assert probe_dimensions(path) is None
        assert probe_dimensions(tmp_path / 'missing.png') is None

    def test_read_png_keeps_png_bytes(self, tmp_path, png_bytes):
        path = tmp_path / 'icon.png'
        data = png_bytes((128, 128))
        path.write_bytes(data)

        icon = read_png(path, ExtractionMethod.FILE_CONVERSION, ConversionFailure)

        assert icon.data == data
        assert icon.dimensions == (128, 128)
        assert icon.method is ExtractionMethod.FILE_CONVERSION

    def test_read_png_reencodes_other_formats(self, tmp_path):
        path = tmp_path / 'icon.tiff'
        Image.new('RGBA', (64, 32)).save(path, format='TIFF')

        icon = read_png(path, ExtractionMethod.RENDER_EXTRACTION, RenderFailure)

        assert icon.data.startswith(b'\x89PNG')
        assert icon.dimensions == (64, 32)

    def test_read_png_missing_or_empty(self, tmp_path):
        with pytest.raises(RenderFailure, match='no image was produced'):
            read_png(tmp_path / 'missing.png', ExtractionMethod.RENDER_EXTRACTION, RenderFailure)

        empty = tmp_path / 'empty.png'
        empty.write_bytes(b'')
        with pytest.raises(ConversionFailure):
            read_png(empty, ExtractionMethod.FILE_CONVERSION, ConversionFailure)

    def test_read_png_undecodable(self, tmp_path):
        path = tmp_path / 'icon.png'
        path.write_bytes(b'\x89PNG not really')
        with pytest.raises(ConversionFailure, match='not decodable'):
            read_png(path, ExtractionMethod.FILE_CONVERSION, ConversionFailure)


class TestPillowIcnsConverter:
    """Test cases for the Pillow based icns converter"""

    def test_largest_representation_is_used(self, tmp_path, icns_bytes):
        source = tmp_path / 'AppIcon.icns'
        source.write_bytes(icns_bytes(1024))
        dest = tmp_path / 'out.png'

        PillowIcnsConverter().convert(source, dest)

        with Image.open(dest) as img:
            assert img.format == 'PNG'
            assert img.size == (1024, 1024)

    def test_retina_entry_beats_larger_point_size(self, tmp_path, png_bytes):
        """A 32pt@2x entry (64px) wins over a 48pt@1x entry (48px)"""
        source = tmp_path / 'Mixed.icns'
        source.write_bytes(icns_container(
            (b'ih32', b'\x80\x40\x20' * 48 * 48),
            (b'h8mk', b'\xff' * 48 * 48),
            (b'ic12', png_bytes((64, 64))),
        ))
        dest = tmp_path / 'out.png'

        PillowIcnsConverter().convert(source, dest)

        with Image.open(dest) as img:
            assert img.size == (64, 64)

    def test_undecodable_source(self, tmp_path):
        source = tmp_path / 'Broken.icns'
        source.write_bytes(b'icns but not really')

        with pytest.raises(ConversionFailure, match='Broken.icns'):
            PillowIcnsConverter().convert(source, tmp_path / 'out.png')


class TestSipsConverter:

    def test_invokes_sips(self, tmp_path):
        with patch('appicons.backends.run_command', return_value=(True, '', '')) as mock_run:
            SipsConverter(timeout=7).convert(Path('/x/AppIcon.icns'), tmp_path / 'out.png')

        command = mock_run.call_args[0][0]
        assert command == ['sips', '-s', 'format', 'png', '/x/AppIcon.icns',
                           '--out', str(tmp_path / 'out.png')]
        assert mock_run.call_args[1]['timeout'] == 7

    def test_failure(self, tmp_path):
        with patch('appicons.backends.run_command', return_value=(False, '', 'Error 13')):
            with pytest.raises(ConversionFailure, match='sips failed: Error 13'):
                SipsConverter().convert(Path('/x/AppIcon.icns'), tmp_path / 'out.png')


class TestFileConversion:
    """Test cases for FileConversion"""

    def test_converts_located_file(self, tmp_path, fake_converter):
        source = tmp_path / 'A.icns'
        source.write_bytes(b'data')

        icon = FileConversion(fake_converter).extract(source)

        assert icon.method is ExtractionMethod.FILE_CONVERSION
        assert icon.dimensions == (512, 512)
        assert fake_converter.calls == [source]

    def test_empty_source(self, tmp_path, fake_converter):
        source = tmp_path / 'Empty.icns'
        source.write_bytes(b'')

        with pytest.raises(ConversionFailure, match='empty'):
            FileConversion(fake_converter).extract(source)
        assert fake_converter.calls == []

    def test_unreadable_source(self, tmp_path, fake_converter):
        with pytest.raises(ConversionFailure, match='cannot read'):
            FileConversion(fake_converter).extract(tmp_path / 'Gone.icns')

    def test_converter_failure_propagates(self, tmp_path, fake_converter):
        source = tmp_path / 'A.icns'
        source.write_bytes(b'data')
        fake_converter.fail = True

        with pytest.raises(ConversionFailure):
            FileConversion(fake_converter).extract(source)


class TestRenderers:
    """Test cases for the renderer adapters"""

    def test_helper_renderer_command(self, tmp_path):
        renderer = HelperRenderer('/opt/extract-icon', timeout=9)
        with patch('appicons.backends.run_command', return_value=(True, 'OK', '')) as mock_run:
            renderer.render(Path('/Applications/Maps.app'), tmp_path / 'out.png', 1024)

        assert mock_run.call_args[0][0] == [
            '/opt/extract-icon', '/Applications/Maps.app', str(tmp_path / 'out.png')
        ]
        assert mock_run.call_args[1]['timeout'] == 9

    def test_helper_renderer_failure(self, tmp_path):
        renderer = HelperRenderer('extract-icon')
        with patch('appicons.backends.run_command', return_value=(False, '', 'Error: Failed')):
            with pytest.raises(RenderFailure, match='icon helper failed'):
                renderer.render(Path('/Applications/Maps.app'), tmp_path / 'out.png', 1024)

    def test_helper_availability(self, tmp_path):
        helper = tmp_path / 'extract-icon'
        helper.write_text('#!/bin/sh\n')
        helper.chmod(0o755)
        with patch('appicons.backends.command_exists', return_value=False):
            assert HelperRenderer(str(helper)).available() is True
            assert HelperRenderer(str(tmp_path / 'absent')).available() is False

    def test_quicklook_collects_thumbnail(self, tmp_path, png_bytes):
        def fake_qlmanage(command, timeout):
            out_dir = Path(command[command.index('-o') + 1])
            (out_dir / 'Maps.app.png').write_bytes(png_bytes((1024, 1024)))
            return True, '', ''

        dest = tmp_path / 'out.png'
        with patch('appicons.backends.run_command', side_effect=fake_qlmanage) as mock_run:
            QuickLookRenderer(timeout=4).render(Path('/Applications/Maps.app'), dest, 1024)

        command = mock_run.call_args[0][0]
        assert command[:4] == ['qlmanage', '-t', '-s', '1024']
        assert command[-1] == '/Applications/Maps.app'
        with Image.open(dest) as img:
            assert img.size == (1024, 1024)

    def test_quicklook_without_thumbnail(self, tmp_path):
        with patch('appicons.backends.run_command', return_value=(True, '', '')):
            with pytest.raises(RenderFailure, match='no thumbnail generated'):
                QuickLookRenderer().render(Path('/Applications/Maps.app'), tmp_path / 'o.png', 1024)

    def test_chain_uses_first_working_renderer(self, tmp_path, fake_renderer):
        broken = Mock()
        broken.available.return_value = True
        broken.render.side_effect = RenderFailure('helper crashed')
        missing = Mock()
        missing.available.return_value = False

        ChainedRenderer([missing, broken, fake_renderer]).render(
            Path('/Applications/X.app'), tmp_path / 'out.png', 1024
        )

        missing.render.assert_not_called()
        broken.render.assert_called_once()
        assert fake_renderer.calls == [Path('/Applications/X.app')]

    def test_chain_without_available_renderers(self, tmp_path):
        missing = Mock()
        missing.available.return_value = False

        with pytest.raises(RenderFailure, match='no icon renderer available'):
            ChainedRenderer([missing]).render(Path('/Applications/X.app'), tmp_path / 'o.png', 1024)

    def test_chain_collects_reasons(self, tmp_path, fake_renderer):
        fake_renderer.fail = True
        with pytest.raises(RenderFailure, match='renderer returned nothing'):
            ChainedRenderer([fake_renderer]).render(Path('/Applications/X.app'), tmp_path / 'o.png', 1024)


class TestRenderExtraction:

    def test_requests_target_size(self, bundle):
        renderer = Mock()

        def render(bundle_path, dest, size):
            assert size == 1024
            Image.new('RGBA', (1024, 1024)).save(dest, format='PNG')

        renderer.render.side_effect = render

        icon = RenderExtraction(renderer).extract(bundle)

        assert icon.method is ExtractionMethod.RENDER_EXTRACTION
        assert icon.dimensions == (1024, 1024)

    def test_accepts_smaller_representation(self, bundle, fake_renderer):
        fake_renderer.size = (512, 512)

        icon = RenderExtraction(fake_renderer, size=1024).extract(bundle)

        assert icon.dimensions == (512, 512)

    def test_failure(self, bundle, fake_renderer):
        fake_renderer.fail = True
        with pytest.raises(RenderFailure):
            RenderExtraction(fake_renderer).extract(bundle)


class TestConversionBackend:
    """Test cases for strategy dispatch"""

    def make_backend(self, converter, renderer):
        return ConversionBackend(FileConversion(converter), RenderExtraction(renderer))

    def test_file_conversion_first(self, bundle, tmp_path, fake_converter, fake_renderer):
        source = tmp_path / 'A.icns'
        source.write_bytes(b'data')

        icon = self.make_backend(fake_converter, fake_renderer).extract(bundle, Found(source))

        assert icon.method is ExtractionMethod.FILE_CONVERSION
        assert fake_renderer.calls == []

    def test_not_found_goes_straight_to_render(self, bundle, fake_converter, fake_renderer):
        icon = self.make_backend(fake_converter, fake_renderer).extract(bundle, NotFound())

        assert icon.method is ExtractionMethod.RENDER_EXTRACTION
        assert fake_converter.calls == []
        assert fake_renderer.calls == [bundle.path]

    def test_conversion_failure_falls_back_to_render(self, bundle, tmp_path, fake_converter, fake_renderer):
        source = tmp_path / 'A.icns'
        source.write_bytes(b'data')
        fake_converter.fail = True

        icon = self.make_backend(fake_converter, fake_renderer).extract(bundle, Found(source))

        assert icon.method is ExtractionMethod.RENDER_EXTRACTION

    def test_both_fail(self, bundle, tmp_path, fake_converter, fake_renderer):
        source = tmp_path / 'A.icns'
        source.write_bytes(b'data')
        fake_converter.fail = True
        fake_renderer.fail = True

        with pytest.raises(ExtractionError) as excinfo:
            self.make_backend(fake_converter, fake_renderer).extract(bundle, Found(source))

        assert excinfo.value.reason == NO_ICON_REASON
        assert not isinstance(excinfo.value, ResolutionAbsent)

    def test_nothing_to_convert_or_render(self, bundle, fake_converter, fake_renderer):
        fake_renderer.fail = True

        with pytest.raises(ResolutionAbsent) as excinfo:
            self.make_backend(fake_converter, fake_renderer).extract(bundle, NotFound())

        assert excinfo.value.reason == NO_ICON_REASON

    def test_from_config(self):
        config = Mock(converter='sips', render_helper='/opt/extract-icon',
                      render_size=512, tool_timeout=11)

        backend = ConversionBackend.from_config(config)

        assert isinstance(backend.file_conversion.converter, SipsConverter)
        assert backend.file_conversion.converter.timeout == 11
        renderers = backend.render_extraction.renderer.renderers
        assert [type(r) for r in renderers] == [HelperRenderer, QuickLookRenderer]
        assert backend.render_extraction.size == 512

    def test_from_config_defaults(self):
        config = Mock(converter='pillow', render_helper=None, render_size=1024, tool_timeout=60)

        backend = ConversionBackend.from_config(config)

        assert isinstance(backend.file_conversion.converter, PillowIcnsConverter)
        renderers = backend.render_extraction.renderer.renderers
        assert [type(r) for r in renderers] == [HelperRenderer, QuickLookRenderer]
        assert renderers[0].helper == DEFAULT_RENDER_HELPER

    def test_default_helper_missing_from_path(self, bundle, fake_renderer):
        """Without an extract-icon executable the chain falls through to the next renderer"""
        config = Mock(converter='pillow', render_helper=None, render_size=1024, tool_timeout=60)
        renderers = ConversionBackend.from_config(config).render_extraction.renderer.renderers
        chain = ChainedRenderer([renderers[0], fake_renderer])

        with patch('appicons.backends.command_exists', return_value=False), \
                patch('appicons.backends.run_command') as mock_run:
            icon = RenderExtraction(chain).extract(bundle)

        mock_run.assert_not_called()
        assert fake_renderer.calls == [bundle.path]
        assert icon.method is ExtractionMethod.RENDER_EXTRACTION
