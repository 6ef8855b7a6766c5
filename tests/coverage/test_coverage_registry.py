"""Tests for the coverage registry (snapshot + per-file queries)."""

from __future__ import annotations

import gc
import threading
from collections.abc import Sequence
from pathlib import Path
from unittest.mock import MagicMock

from gocview.coverage.models import CoverageBlock, group_by_file, to_snapshot
from gocview.coverage.parser import parse_profile
from gocview.coverage.registry import CoverageRegistry, CoverageViewer
from gocview.coverage.resolver import PathResolver

PROFILE = """\
example.org/proj/main.go:3.13,5.2 1 1
example.org/proj/sub/file.go:8.13,9.6 2 0
github.com/other/lib/handler.go:1.1,2.2 3 4
"""


class FakeViewer:
    """Records what the registry asks it to display."""

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        self.shown: list[tuple[CoverageBlock, ...]] = []

    def show_coverage(self, blocks: Sequence[CoverageBlock]) -> None:
        self.shown.append(tuple(blocks))


def _registry(root: Path, profile: str = PROFILE) -> CoverageRegistry:
    registry = CoverageRegistry(PathResolver(root, environ={}))
    registry.update(to_snapshot(group_by_file(parse_profile(profile))))
    return registry


class TestQuery:
    def test_exact_match(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        blocks = registry.query("example.org/proj/sub/file.go")
        assert [b.start_line for b in blocks] == [8]

    def test_suffix_match_on_relative_path(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        blocks = registry.query("proj/main.go")
        assert blocks[0].module_path == "example.org/proj/main.go"

    def test_suffix_match_on_file_name(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        local = go_workspace / "internal" / "handler" / "handler.go"

        blocks = registry.query(str(local))

        assert [b.module_path for b in blocks] == ["github.com/other/lib/handler.go"]

    def test_suffix_match_takes_first_key_in_profile_order(self, go_workspace: Path) -> None:
        profile = "a.org/x/util.go:1.1,2.1 1 1\nb.org/y/util.go:1.1,2.1 1 0\n"
        registry = _registry(go_workspace, profile)
        assert registry.query("/somewhere/util.go")[0].module_path == "a.org/x/util.go"

    def test_reverse_resolution_match(self, go_workspace: Path) -> None:
        (go_workspace / "pkg").mkdir()
        local = go_workspace / "pkg" / "server.go"
        local.write_text("package pkg\n")
        # file name differs from the key's last segment; only resolution links them
        profile = "example.org/proj/pkg/server.go:1.1,2.1 1 1\n"
        registry = _registry(go_workspace, profile)
        registry.resolver.resolve = MagicMock(return_value=local)  # type: ignore[method-assign]

        blocks = registry.query(str(local.with_name("srv_alias.go")))
        assert blocks == ()

        registry.resolver.resolve = MagicMock(  # type: ignore[method-assign]
            return_value=local.with_name("srv_alias.go")
        )
        blocks = registry.query(str(local.with_name("srv_alias.go")))
        assert blocks[0].module_path == "example.org/proj/pkg/server.go"

    def test_no_match_returns_empty(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        assert registry.query(str(go_workspace / "README.md")) == ()

    def test_empty_snapshot(self, go_workspace: Path) -> None:
        registry = CoverageRegistry(PathResolver(go_workspace, environ={}))
        assert registry.query(str(go_workspace / "main.go")) == ()

    def test_empty_path(self, go_workspace: Path) -> None:
        assert _registry(go_workspace).query("") == ()

    def test_accepts_path_objects(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        assert registry.query(go_workspace / "main.go")

    def test_project_omits_files_without_coverage(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        main = str(go_workspace / "main.go")
        readme = str(go_workspace / "README.md")

        projected = registry.project([main, readme])

        assert list(projected) == [main]

    def test_project_uses_one_snapshot_throughout(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace, "m/a.go:1.1,2.1 1 1\nm/b.go:1.1,2.1 1 0\n")
        replacement = to_snapshot(group_by_file(parse_profile("m/b.go:1.1,2.1 1 99\n")))

        def resolve_and_replace(module_path: str) -> None:
            # an update lands while the first path is still being matched
            registry.update(replacement)
            return None

        registry.resolver.resolve = MagicMock(  # type: ignore[method-assign]
            side_effect=resolve_and_replace
        )

        projected = registry.project(["zzz.txt", "b.go"])

        assert list(projected) == ["b.go"]
        assert projected["b.go"][0].execution_count == 0
        assert registry.snapshot["m/b.go"][0].execution_count == 99


class TestSnapshotReplacement:
    def test_update_replaces_everything(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        registry.update(to_snapshot(group_by_file(parse_profile("only/new.go:1.1,2.1 1 1\n"))))

        assert list(registry.snapshot) == ["only/new.go"]
        assert registry.query("example.org/proj/main.go") == ()

    def test_snapshot_is_read_only_copy(self, go_workspace: Path) -> None:
        source = to_snapshot(group_by_file(parse_profile(PROFILE)))
        registry = CoverageRegistry(PathResolver(go_workspace, environ={}))
        registry.update(source)

        source.clear()

        assert len(registry.snapshot) == 3

    def test_clear(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        registry.clear()
        assert registry.snapshot == {}
        assert registry.query("example.org/proj/main.go") == ()

    def test_concurrent_readers_never_see_mixed_snapshots(self, go_workspace: Path) -> None:
        old = to_snapshot(group_by_file(parse_profile("a/x.go:1.1,2.1 1 1\na/y.go:1.1,2.1 1 1\n")))
        new = to_snapshot(group_by_file(parse_profile("b/x.go:1.1,2.1 1 0\nb/y.go:1.1,2.1 1 0\n")))
        registry = CoverageRegistry(PathResolver(go_workspace, environ={}))
        registry.update(old)
        mixed: list[set[str]] = []
        stop = threading.Event()

        def reader() -> None:
            while not stop.is_set():
                prefixes = {key.split("/")[0] for key in registry.snapshot}
                if len(prefixes) > 1:
                    mixed.append(prefixes)

        threads = [threading.Thread(target=reader) for _ in range(4)]
        for t in threads:
            t.start()
        for i in range(200):
            registry.update(new if i % 2 else old)
        stop.set()
        for t in threads:
            t.join()

        assert mixed == []


class TestViewers:
    def test_register_applies_current_coverage(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        viewer = FakeViewer(str(go_workspace / "main.go"))

        registry.register(viewer)

        assert len(viewer.shown) == 1
        assert viewer.shown[0][0].module_path == "example.org/proj/main.go"

    def test_viewer_registered_before_update_is_refreshed(self, go_workspace: Path) -> None:
        registry = CoverageRegistry(PathResolver(go_workspace, environ={}))
        viewer = FakeViewer(str(go_workspace / "main.go"))
        registry.register(viewer)
        assert viewer.shown == [()]

        registry.update(to_snapshot(group_by_file(parse_profile(PROFILE))))

        assert len(viewer.shown) == 2
        assert viewer.shown[-1]

    def test_clear_notifies_empty(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        viewer = FakeViewer(str(go_workspace / "main.go"))
        registry.register(viewer)

        registry.clear()

        assert viewer.shown[-1] == ()

    def test_unregister_stops_notifications(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        viewer = FakeViewer(str(go_workspace / "main.go"))
        registry.register(viewer)
        registry.unregister(viewer)

        registry.clear()

        assert len(viewer.shown) == 1

    def test_viewers_are_held_weakly(self, go_workspace: Path) -> None:
        registry = _registry(go_workspace)
        viewer = FakeViewer(str(go_workspace / "main.go"))
        registry.register(viewer)
        assert registry.viewer_count == 1

        del viewer
        gc.collect()

        assert registry.viewer_count == 0

    def test_fake_viewer_satisfies_protocol(self) -> None:
        assert isinstance(FakeViewer("x.go"), CoverageViewer)
