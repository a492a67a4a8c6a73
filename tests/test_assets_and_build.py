import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from folio import build as build_mod
from folio.assets import OutputInitializer
from folio.build import (
    BuildResult,
    DuplicateSlugError,
    NoContentError,
    build_site,
    load_config,
    timestamps_command,
)
from folio.bundler import ScriptBundler, find_executable
from folio.content import discover_static
from folio.errors import BundleError
from folio.timestamps import TimestampRecord


def create_project(tmp_path: Path) -> Path:
    project = tmp_path
    (project / "content").mkdir()
    (project / "templates" / "partials").mkdir(parents=True)
    (project / "static" / "img").mkdir(parents=True)

    (project / "folio.yaml").write_text("entry_points: []\n", encoding="utf-8")
    (project / "templates" / "layout.jinja").write_text(
        "<title>{{ title }}</title>{% include 'nav' %}"
        "{% if toc is defined %}{{ render_toc(toc) }}{{ readingTime }}{% endif %}"
        "{{ body }}<footer>{{ by }}</footer>",
        encoding="utf-8",
    )
    (project / "templates" / "partials" / "nav.jinja").write_text(
        "<nav>{% for route in routes %}"
        '<a class="{{ if_equals(route.slug, slug, "on", "off") }}" href="{{ route.url }}">{{ route.title }}</a>'
        "{% endfor %}</nav>",
        encoding="utf-8",
    )
    (project / "content" / "_index.md").write_text(
        "---\ntitle: Home\nslug: index\n---\n# Welcome\n", encoding="utf-8"
    )
    (project / "content" / "post.md").write_text(
        "---\ntitle: Post\nslug: My Post\n---\n# Hello\n\n## Part\n", encoding="utf-8"
    )
    (project / "content" / "talk.md").write_text(
        "---\ntitle: Talk\nslug: talk\nlayout: slides\n---\n# Hello\n", encoding="utf-8"
    )
    (project / "static" / "robots.txt").write_text("User-agent: *", encoding="utf-8")
    (project / "static" / "img" / "logo.bin").write_bytes(b"\x00\x01\xff")
    return project


RECORDS = [
    TimestampRecord("content/talk.md", 50, "Grace", 5),
    TimestampRecord("content/_index.md", 90, "Ada", 9),
    TimestampRecord("content/post.md", 30, "Linus", 3),
]


@pytest.fixture
def fake_timestamps(monkeypatch):
    calls = {}

    def fake_load(command, project_root):
        calls["command"] = command
        calls["root"] = project_root
        return list(RECORDS)

    monkeypatch.setattr(build_mod, "load_timestamps", fake_load)
    return calls


def snapshot(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


def test_load_config_defaults_and_overrides(tmp_path):
    config = load_config(tmp_path)
    assert config["content_dir"] == "content"
    assert config["output_dir"] == "public"
    assert config["entry_points"] == ["templates/index.ts", "templates/reveal.ts"]

    (tmp_path / "folio.yaml").write_text("output_dir: dist\n", encoding="utf-8")
    assert load_config(tmp_path)["output_dir"] == "dist"

    (tmp_path / "folio.yaml").write_text("- not a mapping\n", encoding="utf-8")
    assert load_config(tmp_path)["output_dir"] == "public"


def test_timestamps_command():
    assert timestamps_command({}) == [sys.executable, "-m", "folio", "timestamps"]
    assert timestamps_command({"timestamps_command": "node gen/ts.mjs"}) == [
        "node",
        "gen/ts.mjs",
    ]
    assert timestamps_command({"timestamps_command": ["node", 1]}) == ["node", "1"]


def test_output_initializer_mirrors_static(tmp_path):
    project = create_project(tmp_path)
    output = project / "public"
    (output / "stale").mkdir(parents=True)
    (output / "stale" / "old.html").write_text("old", encoding="utf-8")

    static = project / "static"
    copied = OutputInitializer(static, output).run(discover_static(static))

    assert not (output / "stale").exists()
    assert (output / "robots.txt").read_text(encoding="utf-8") == "User-agent: *"
    assert (output / "img" / "logo.bin").read_bytes() == b"\x00\x01\xff"
    assert set(copied) == {output / "robots.txt", output / "img" / "logo.bin"}


def test_output_initializer_without_static(tmp_path):
    output = tmp_path / "public"
    OutputInitializer(tmp_path / "static", output).run([])
    assert output.is_dir()
    assert list(output.iterdir()) == []


def test_find_executable_prefers_path_then_node_modules(monkeypatch, tmp_path):
    monkeypatch.setattr(shutil, "which", lambda name: None)
    assert find_executable("esbuild", tmp_path) is None

    local = tmp_path / "node_modules" / ".bin" / "esbuild"
    local.parent.mkdir(parents=True)
    local.write_text("#!/bin/sh\n", encoding="utf-8")
    assert find_executable("esbuild", tmp_path) == str(local)

    monkeypatch.setattr(shutil, "which", lambda name: "/usr/bin/esbuild")
    assert find_executable("esbuild", tmp_path) == "/usr/bin/esbuild"


def test_bundler_runs_esbuild_once(monkeypatch, tmp_path):
    monkeypatch.setattr(shutil, "which", lambda name: "/bin/esbuild")
    calls = []

    def fake_run(cmd, cwd=None, capture_output=None, text=None):
        calls.append((cmd, cwd))
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    monkeypatch.setattr(subprocess, "run", fake_run)
    output = tmp_path / "public"
    ScriptBundler(tmp_path, output, ["templates/index.ts", "templates/reveal.ts"]).run()

    assert len(calls) == 1
    cmd, cwd = calls[0]
    assert cwd == tmp_path
    assert cmd[:3] == ["/bin/esbuild", "templates/index.ts", "templates/reveal.ts"]
    for flag in (
        "--bundle",
        "--format=esm",
        "--minify",
        "--sourcemap",
        "--target=esnext",
        "--platform=browser",
        '--define:process.env.NODE_ENV="production"',
        f"--outdir={output}",
    ):
        assert flag in cmd


def test_bundler_failure_surfaces_diagnostic(monkeypatch, tmp_path):
    monkeypatch.setattr(shutil, "which", lambda name: "/bin/esbuild")

    def fake_run(cmd, cwd=None, capture_output=None, text=None):
        return subprocess.CompletedProcess(
            cmd, 1, stdout="", stderr='✘ [ERROR] Could not resolve "nope"'
        )

    monkeypatch.setattr(subprocess, "run", fake_run)
    with pytest.raises(BundleError) as exc:
        ScriptBundler(tmp_path, tmp_path / "public", ["templates/index.ts"]).run()
    assert 'Could not resolve "nope"' in exc.value.message
    assert exc.value.source_path == tmp_path / "templates/index.ts"


def test_bundler_requires_esbuild(monkeypatch, tmp_path):
    monkeypatch.setattr(shutil, "which", lambda name: None)
    with pytest.raises(BundleError, match="esbuild not found"):
        ScriptBundler(tmp_path, tmp_path / "public", ["templates/index.ts"]).run()


def test_bundler_skips_without_entry_points(monkeypatch, tmp_path):
    def fail_run(*args, **kwargs):
        raise AssertionError("esbuild should not run")

    monkeypatch.setattr(subprocess, "run", fail_run)
    ScriptBundler(tmp_path, tmp_path / "public", []).run()


def test_build_site_writes_pages(tmp_path, fake_timestamps):
    project = create_project(tmp_path)
    result = build_site(project)

    assert isinstance(result, BuildResult)
    output = project / "public"
    assert result.output_dir == project.resolve() / "public"
    assert fake_timestamps["root"] == project.resolve()
    assert fake_timestamps["command"][-2:] == ["folio", "timestamps"]
    assert [r.slug for r in result.routes] == ["", "my-post", "talk"]
    assert [p.slug for p in result.pages] == ["", "my-post", "talk"]

    home = (output / "index.html").read_text(encoding="utf-8")
    assert "<title>Home</title>" in home
    assert '<a class="on" href="/">Home</a>' in home
    assert '<a class="off" href="/my-post/">Post</a>' in home
    assert "<footer>Ada</footer>" in home

    post = (output / "my-post" / "index.html").read_text(encoding="utf-8")
    assert '<h1 id="hello">Hello</h1>' in post
    assert '<a href="#part">Part</a>' in post
    assert "1 min read" in post
    assert "<footer>Linus</footer>" in post

    talk = (output / "talk" / "index.html").read_text(encoding="utf-8")
    assert "# Hello" in talk
    assert "<h1" not in talk
    assert "min read" not in talk

    assert (output / "robots.txt").exists()
    assert (output / "img" / "logo.bin").read_bytes() == b"\x00\x01\xff"


def test_build_site_is_deterministic(tmp_path, fake_timestamps):
    project = create_project(tmp_path)
    build_site(project)
    first = snapshot(project / "public")
    build_site(project)
    assert snapshot(project / "public") == first


def test_build_site_without_content(tmp_path, fake_timestamps):
    project = create_project(tmp_path)
    for path in (project / "content").iterdir():
        path.unlink()
    (project / "public").mkdir()
    (project / "public" / "keep.txt").write_text("x", encoding="utf-8")

    with pytest.raises(NoContentError):
        build_site(project)
    assert (project / "public" / "keep.txt").exists()


def test_build_site_duplicate_slug_stops_later_pages(tmp_path, fake_timestamps):
    project = create_project(tmp_path)
    (project / "content" / "post_copy.md").write_text(
        "---\ntitle: Copy\nslug: my-post\n---\n", encoding="utf-8"
    )
    with pytest.raises(DuplicateSlugError) as exc:
        build_site(project)
    assert exc.value.slug == "my-post"
    assert exc.value.source_path.name == "post_copy.md"
    assert (project / "public" / "index.html").exists()
    assert (project / "public" / "my-post" / "index.html").exists()
    assert not (project / "public" / "talk").exists()


def test_build_site_bundles_before_routes(tmp_path, fake_timestamps, monkeypatch):
    project = create_project(tmp_path)
    (project / "folio.yaml").write_text(
        "entry_points: [templates/index.ts]\n", encoding="utf-8"
    )
    order = []

    def fake_run(self):
        order.append("bundle")
        assert not (project / "public" / "index.html").exists()
        assert (project / "public" / "robots.txt").exists()

    monkeypatch.setattr(ScriptBundler, "run", fake_run)
    build_site(project)
    assert order == ["bundle"]
    assert (project / "public" / "index.html").exists()


def test_build_site_honours_configured_directories(tmp_path, fake_timestamps):
    project = create_project(tmp_path)
    (project / "folio.yaml").write_text(
        "entry_points: []\noutput_dir: dist\n", encoding="utf-8"
    )
    result = build_site(project)
    assert result.output_dir == project.resolve() / "dist"
    assert (project / "dist" / "my-post" / "index.html").exists()
