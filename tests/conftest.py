"""Test configuration and fixtures for the appicons test suite"""

import io
import plistlib
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from appicons.errors import ConversionFailure, RenderFailure


def make_png_bytes(size=(64, 64), color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid square as PNG"""
    buffer = io.BytesIO()
    Image.new('RGBA', size, color).save(buffer, format='PNG')
    return buffer.getvalue()


def make_icns_bytes(size=1024, color=(0, 128, 255, 255)) -> bytes:
    """Encode a solid square as a multi-resolution icns container"""
    buffer = io.BytesIO()
    Image.new('RGBA', (size, size), color).save(buffer, format='ICNS')
    return buffer.getvalue()


class FakeConverter:
    """Legacy converter that writes a fixed PNG and remembers its inputs"""

    def __init__(self, size=(512, 512), fail=False):
        self.size = size
        self.fail = fail
        self.calls = []

    def convert(self, source, dest):
        self.calls.append(Path(source))
        if self.fail:
            raise ConversionFailure(f"cannot decode {Path(source).name}")
        Path(dest).write_bytes(make_png_bytes(self.size))


class FakeRenderer:
    """Icon renderer stand-in for the macOS rendering facility"""

    def __init__(self, size=(1024, 1024), fail=False):
        self.size = size
        self.fail = fail
        self.calls = []

    def available(self):
        return True

    def render(self, bundle_path, dest, size):
        self.calls.append(Path(bundle_path))
        if self.fail:
            raise RenderFailure('renderer returned nothing')
        Path(dest).write_bytes(make_png_bytes(self.size))


@pytest.fixture
def project_root():
    """Fixture providing path to project root directory"""
    return PROJECT_ROOT


@pytest.fixture
def png_bytes():
    return make_png_bytes


@pytest.fixture
def icns_bytes():
    return make_icns_bytes


@pytest.fixture
def apps_root(tmp_path):
    """An empty directory standing in for /Applications"""
    root = tmp_path / 'Applications'
    root.mkdir()
    return root


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / 'app_icons'


@pytest.fixture
def make_bundle():
    """
    Factory creating a fake application bundle

    Args (of the returned callable):
        root: Directory to create the bundle in
        name: Bundle directory name, e.g. 'Safari.app'
        icon_file: CFBundleIconFile value; None writes no key
        resources: Mapping of file name to bytes placed in Contents/Resources
        manifest: False to omit Info.plist, bytes to write raw content
    """
    def _make(root, name, icon_file=None, resources=None, manifest=True):
        bundle = Path(root) / name
        contents = bundle / 'Contents'
        resources_dir = contents / 'Resources'
        resources_dir.mkdir(parents=True)

        if isinstance(manifest, bytes):
            (contents / 'Info.plist').write_bytes(manifest)
        elif manifest:
            info = {'CFBundleName': name[:-4] if name.endswith('.app') else name}
            if icon_file is not None:
                info['CFBundleIconFile'] = icon_file
            with open(contents / 'Info.plist', 'wb') as f:
                plistlib.dump(info, f)

        for file_name, data in (resources or {}).items():
            (resources_dir / file_name).write_bytes(data)

        return bundle

    return _make


@pytest.fixture
def fake_converter():
    return FakeConverter()


@pytest.fixture
def fake_renderer():
    return FakeRenderer()


@pytest.fixture
def failing_renderer():
    return FakeRenderer(fail=True)


# Pytest hooks for better test organization
def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "core: Pipeline module tests")
    config.addinivalue_line("markers", "common: Common library tests")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location"""
    for item in items:
        path = str(item.fspath)
        if "unit" in path:
            item.add_marker(pytest.mark.unit)
        elif "integration" in path:
            item.add_marker(pytest.mark.integration)
        if "core" in path:
            item.add_marker(pytest.mark.core)
        elif "common" in path:
            item.add_marker(pytest.mark.common)
