"""End-to-end run tests with a faked GitHub API."""

from __future__ import annotations

from pathlib import Path

import pytest

import generate_languages as gl
from tests._fixtures.github import FakeResponse, envelope, repo


@pytest.fixture
def workdir(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_TOKEN", "secret")
    monkeypatch.setenv("GITHUB_USERNAME", "octocat")
    return tmp_path


def test_main_writes_svg_under_assets(fake_post, workdir: Path, capsys) -> None:
    repos = [repo({"JavaScript": 300, "TypeScript": 100}), repo({"Python": 600})]
    fake_post.responses.append(FakeResponse(envelope(*repos)))

    gl.main()

    out_file = workdir / "assets" / "languages.svg"
    assert out_file.read_text(encoding="utf-8") == gl.make_languages_svg(gl.aggregate_languages(repos))
    assert 'height="140"' in out_file.read_text(encoding="utf-8")
    out = capsys.readouterr().out
    assert "Fetching language data" in out
    assert "SVG written to" in out


def test_main_overwrites_existing_output(fake_post, workdir: Path) -> None:
    (workdir / "assets").mkdir()
    (workdir / "assets" / "languages.svg").write_text("stale", encoding="utf-8")
    fake_post.responses.append(FakeResponse(envelope(repo({"Go": 1}))))

    gl.main()

    assert "stale" not in (workdir / "assets" / "languages.svg").read_text(encoding="utf-8")


def test_main_exits_nonzero_on_query_errors(fake_post, workdir: Path, monkeypatch, capsys) -> None:
    fake_post.responses.append(FakeResponse({"errors": [{"message": "Bad credentials"}]}))

    def _never_called(*args, **kwargs):
        raise AssertionError("aggregation should not run")

    monkeypatch.setattr(gl, "aggregate_languages", _never_called)
    monkeypatch.setattr(gl, "make_languages_svg", _never_called)

    with pytest.raises(SystemExit) as excinfo:
        gl.main()

    assert excinfo.value.code == 1
    assert not (workdir / "assets").exists()
    assert "Bad credentials" in capsys.readouterr().err


def test_main_exits_nonzero_when_write_fails(fake_post, workdir: Path) -> None:
    fake_post.responses.append(FakeResponse(envelope(repo({"Go": 1}))))

    # A plain file where the output directory should be.
    (workdir / "assets").write_text("", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        gl.main()
    assert excinfo.value.code == 1


def test_write_svg_is_idempotent(tmp_path: Path) -> None:
    first = gl.write_svg("<svg/>", base_dir=str(tmp_path))
    second = gl.write_svg("<svg/>\n", base_dir=str(tmp_path))
    assert first == second == str(tmp_path / "assets" / "languages.svg")
    assert Path(second).read_text(encoding="utf-8") == "<svg/>\n"
