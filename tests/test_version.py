"""Tests for reltagger.release.version (title prefix stripping, step output)."""

from reltagger.release.version import TITLE_PREFIX, extract_version, write_step_output


class TestExtractVersion:
    """extract_version strips "release: " only at the start of the title."""

    def test_prefix_stripped(self) -> None:
        """"release: X" yields exactly X."""
        assert extract_version("release: v1.2.3") == "v1.2.3"
        assert extract_version("release: 2.0.0") == "2.0.0"
        assert extract_version("release: 0.1.0-rc.1") == "0.1.0-rc.1"

    def test_title_without_prefix_unchanged(self) -> None:
        """A title without the prefix passes through unchanged."""
        assert extract_version("2.0.0") == "2.0.0"

    def test_prefix_not_at_start_unchanged(self) -> None:
        """Prefix elsewhere in the title is not removed."""
        assert extract_version("X release: Y") == "X release: Y"

    def test_prefix_stripped_once(self) -> None:
        """Only the leading occurrence is removed."""
        assert extract_version("release: release: 1.0.0") == "release: 1.0.0"

    def test_prefix_requires_trailing_space(self) -> None:
        """"release:1.0.0" does not match the prefix and is kept whole."""
        assert extract_version("release:1.0.0") == "release:1.0.0"
        assert extract_version("Release: 1.0.0") == "Release: 1.0.0"

    def test_custom_prefix(self) -> None:
        """A configured prefix replaces the default."""
        assert extract_version("chore(release): 3.1.4", prefix="chore(release): ") == "3.1.4"

    def test_default_prefix_constant(self) -> None:
        assert TITLE_PREFIX == "release: "


class TestWriteStepOutput:
    """write_step_output appends NAME=value lines."""

    def test_appends_line(self, tmp_path) -> None:
        out = tmp_path / "github_output"
        out.write_text("OTHER=1\n")
        write_step_output("VERSION", "v1.2.3", out)
        assert out.read_text() == "OTHER=1\nVERSION=v1.2.3\n"

    def test_creates_file(self, tmp_path) -> None:
        out = tmp_path / "new_output"
        write_step_output("VERSION", "2.0.0", str(out))
        assert out.read_text() == "VERSION=2.0.0\n"
