import logging
import zipfile
from pathlib import Path

import pytest

from upgrade_differ.index.sources import WorkingTree, ZipBaselineSource
from upgrade_differ.logging_config import DifferStreamHandler

PORTAL_PREFIX = "liferay-portal-src-6.0.6"
EXT_MODULE = "ext/sample-ext/docroot/WEB-INF"

FOO_BASELINE = "package com.liferay;\n\npublic class Foo {\n    int a = 1;\n}\n"
FOO_MODIFIED = "package com.liferay;\n\npublic class Foo {\n    int a = 2;\n}\n"
BAR_CONTENT = "public class Bar {}\n"
VIEW_BASELINE = "<p>hello</p>\n"
VIEW_MODIFIED = "<p>hello</p>\n<p>world</p>\n"
NEW_CONTENT = "public class Brand {}\n"


def write_zip(path: Path, files: dict[str, str]) -> Path:
    """Write a zip archive with the given entries (plus their directory entries)."""
    with zipfile.ZipFile(path, "w") as archive:
        directories = set()
        for name in files:
            parts = name.split("/")[:-1]
            for depth in range(1, len(parts) + 1):
                directories.add("/".join(parts[:depth]) + "/")
        for directory in sorted(directories):
            archive.writestr(directory, "")
        for name, content in files.items():
            archive.writestr(name, content)
    return path


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_bytes(content.encode("utf-8"))
    return root


@pytest.fixture
def portal_files():
    return {
        f"{PORTAL_PREFIX}/portal-impl/src/com/liferay/Foo.java": FOO_BASELINE,
        f"{PORTAL_PREFIX}/portal-service/src/com/liferay/Bar.java": BAR_CONTENT,
        f"{PORTAL_PREFIX}/portal-web/docroot/html/view.jsp": VIEW_BASELINE,
        f"{PORTAL_PREFIX}/build.xml": "<project/>\n",
    }


@pytest.fixture
def portal_zip(tmp_path, portal_files):
    return write_zip(tmp_path / "portal-src.zip", portal_files)


@pytest.fixture
def sdk_files():
    return {
        f"{EXT_MODULE}/ext-impl/src/com/liferay/Foo.java": FOO_MODIFIED,
        f"{EXT_MODULE}/ext-service/src/com/liferay/Bar.java": BAR_CONTENT,
        f"{EXT_MODULE}/ext-web/docroot/html/view.jsp": VIEW_MODIFIED,
        f"{EXT_MODULE}/ext-impl/src/com/liferay/Brand.java": NEW_CONTENT,
        "portlets/sample-portlet/docroot/view.jsp": "<p>not an ext</p>\n",
        "build.xml": "<project/>\n",
    }


@pytest.fixture
def sdk_root(tmp_path, sdk_files):
    return write_tree(tmp_path / "plugins-sdk", sdk_files).resolve()


@pytest.fixture
def baseline_source(portal_zip):
    source = ZipBaselineSource(portal_zip)
    yield source
    source.close()


@pytest.fixture
def working_tree(sdk_root):
    return WorkingTree(sdk_root)


@pytest.fixture(autouse=True)
def _detach_cli_log_handlers():
    """Drop handlers installed by main() so they never outlive captured streams."""
    yield
    logger = logging.getLogger("upgrade_differ")
    for handler in list(logger.handlers):
        if isinstance(handler, DifferStreamHandler):
            logger.removeHandler(handler)
