from pathlib import Path

from neonbuilder.io.storage import OutputStore, directory_size


def test_output_store_writes_text_and_measures_tree(tmp_path: Path) -> None:
    store = OutputStore(tmp_path / "Bundle")

    section_dir = store.ensure_directory("branding")
    text_path = store.save_text(Path("branding/branding.txt"), "héllo")
    store.save_text("nested/deeper/notes.txt", "abc")

    assert section_dir == tmp_path / "Bundle" / "branding"
    assert section_dir.is_dir()
    assert text_path.read_text(encoding="utf-8") == "héllo"
    assert store.size_bytes() == len("héllo".encode("utf-8")) + 3
    assert directory_size(tmp_path / "Bundle" / "nested") == 3


def test_ensure_directory_is_idempotent_for_root(tmp_path: Path) -> None:
    store = OutputStore(tmp_path / "out")

    assert store.ensure_directory() == tmp_path / "out"
    assert store.ensure_directory() == tmp_path / "out"
    assert store.size_bytes() == 0
