import io
import zipfile

import pytest

from services.ingest import IngestError, detect_languages, extract_zip, is_auth_file, is_code_file, should_skip


def _zip(entries: dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


def test_detect_languages_is_ordered_and_unique():
    paths = ["src/a.ts", "src/b.py", "src/c.ts", "README.md", "Makefile", "lib/d.RS"]
    assert detect_languages(paths) == ["TypeScript", "Python", "Rust"]


def test_detect_languages_ignores_dotted_directories():
    assert detect_languages(["pkg.py/README"]) == []


def test_path_predicates():
    assert is_code_file("src/App.TSX")
    assert not is_code_file("README.md")
    assert is_auth_file("server/middleware/session.js")
    assert not is_auth_file("src/utils.py")
    assert should_skip("node_modules/react/index.js")
    assert should_skip("assets/logo.png")
    assert not should_skip("src/node_modules.py")


def test_extract_zip_reads_text_files():
    data = _zip({
        "src/app.py": b"print('hi')\n",
        "README.md": "café".encode("utf-8"),
    })
    ingested = extract_zip(data)

    assert ingested.files == {"src/app.py": "print('hi')\n", "README.md": "café"}
    assert ingested.total_size == len("print('hi')\n") + len("café")


def test_extract_zip_skips_binary_vendored_and_undecodable():
    data = _zip({
        "app.js": b"1",
        "node_modules/x/index.js": b"2",
        "__MACOSX/._app.js": b"3",
        "logo.png": b"\x89PNG",
        "data.txt": b"\xff\xfe\xfd",
    })
    assert set(extract_zip(data).files) == {"app.js"}


def test_extract_zip_strips_single_top_level_folder():
    data = _zip({"project-main/src/a.py": b"a", "project-main/b.py": b"b"})
    assert set(extract_zip(data).files) == {"src/a.py", "b.py"}


def test_extract_zip_keeps_mixed_roots():
    data = _zip({"one/a.py": b"a", "two/b.py": b"b"})
    assert set(extract_zip(data).files) == {"one/a.py", "two/b.py"}


def test_extract_zip_rejects_non_zip():
    with pytest.raises(IngestError):
        extract_zip(b"definitely not a zip")
