"""
Tests for the command line entry point.

Run with: pytest tests/test_main.py -v
"""

import main
from src.errors import ClipboardWriteFailed


class TestMain:
    def test_lists_categories(self, data_dir):
        assert main.main(["--data-dir", str(data_dir)]) == 0

    def test_lists_bases(self, data_dir):
        assert main.main(["--data-dir", str(data_dir), "--bases", "hoodie"]) == 0
        assert main.main(["--data-dir", str(data_dir), "--bases", "socks"]) == 1

    def test_render(self, data_dir):
        assert main.main(["--data-dir", str(data_dir), "--render", "3001U", "-f", "organic"]) == 0

    def test_render_unknown_or_inactive_code(self, data_dir):
        assert main.main(["--data-dir", str(data_dir), "--render", "NOPE"]) == 1
        assert main.main(["--data-dir", str(data_dir), "--render", "64000"]) == 1

    def test_variants(self, data_dir):
        assert main.main(["--data-dir", str(data_dir), "--variants", "3001U"]) == 0

    def test_variant_search(self, data_dir, monkeypatch):
        printed = []

        def record_variants(snapshot, base_code, query=""):
            printed.append([v.sku for v in snapshot.active_variants(base_code or None, query=query)])

        monkeypatch.setattr(main, "print_variants", record_variants)
        assert main.main(["--data-dir", str(data_dir), "--variants", "--search", "stanley"]) == 0
        assert printed == [["AF-TEE-STTU169-BAUHAUS-DARK-M"]]

    def test_missing_source(self, tmp_path):
        assert main.main(["--data-dir", str(tmp_path / "missing")]) == 1

    def test_copy_failure_is_reported(self, data_dir, monkeypatch):
        class FailingLoader:
            def copy(self, text):
                raise ClipboardWriteFailed("no clipboard")

        monkeypatch.setattr(main, "ClipboardLoader", FailingLoader)
        assert main.main(["--data-dir", str(data_dir), "--render", "3001U", "--copy"]) == 1

    def test_copy_sends_rendered_block(self, data_dir, monkeypatch):
        copied = []

        class RecordingLoader:
            def copy(self, text):
                copied.append(text)
                return "command"

        monkeypatch.setattr(main, "ClipboardLoader", RecordingLoader)
        assert main.main(["--data-dir", str(data_dir), "--render", "4062", "--copy"]) == 0
        assert copied[0].startswith("Base Product Name: Women's Crop Tee\n")
        assert "A modern twist on the classic tee" in copied[0]


if __name__ == "__main__":
    import pytest

    pytest.main([__file__, "-v"])
