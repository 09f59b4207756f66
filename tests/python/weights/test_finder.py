import typing as t

import pytest

from rogue._internal.utils.file import SKIP_DIR, walk
from rogue._internal.weights import find_weights


def test_no_weights(make_files, small_weight_threshold):
    root = make_files(others=["predict.py", "data/config.json"])
    assert find_weights(walk, root) == ([], [])


def test_weights_in_root_and_dirs(make_files, small_weight_threshold):
    root = make_files(
        weights=["model.bin", "weights/a.bin", "weights/deep/b.bin", "ckpt/c.pt"],
        others=["predict.py"],
    )
    assert find_weights(walk, root) == (["ckpt", "weights"], ["model.bin"])


def test_code_files_are_not_weights(make_files, small_weight_threshold):
    root = make_files(weights=["big.py", "notebook.ipynb", "model.bin"])
    assert find_weights(walk, root) == ([], ["model.bin"])


def test_dir_containing_code_lists_files(make_files, small_weight_threshold):
    root = make_files(
        weights=["pkg/weights.bin", "pkg/sub/more.bin", "weights/a.bin"],
        others=["pkg/sub/module.py"],
    )
    dirs, files = find_weights(walk, root)
    assert dirs == ["weights"]
    assert files == ["pkg/sub/more.bin", "pkg/weights.bin"]


def test_ignored_dirs(make_files, small_weight_threshold):
    root = make_files(
        weights=[
            ".git/objects/pack.bin",
            ".rogue/tmp/build1/rogue.whl",
            "__pycache__/x.bin",
            "venv/lib/torch.so",
            "node_modules/big.bin",
            "model.bin",
        ]
    )
    assert find_weights(walk, root) == ([], ["model.bin"])


def test_small_files_are_not_weights(make_files, small_weight_threshold, tmp_path):
    root = make_files(weights=["model.bin"])
    (tmp_path / "small.bin").write_bytes(b"x" * (small_weight_threshold - 1))
    assert find_weights(walk, root) == ([], ["model.bin"])


def test_fake_walker(tmp_path, small_weight_threshold):
    (tmp_path / "model.bin").write_bytes(b"x" * small_weight_threshold)
    visited: t.List[str] = []

    def walker(root, visitor):
        for path, is_dir in [(str(root), True), (str(tmp_path / "model.bin"), False)]:
            visited.append(path)
            visitor(path, is_dir, None)

    assert find_weights(walker, tmp_path) == ([], ["model.bin"])
    assert len(visited) == 2


def test_walker_error_propagates(tmp_path):
    def walker(root, visitor):
        visitor(str(root), True, PermissionError("denied"))

    with pytest.raises(PermissionError):
        find_weights(walker, tmp_path)


def test_visitor_skips_ignored_dirs(make_files, small_weight_threshold):
    root = make_files(weights=[".cache/big.bin"])
    skipped: t.List[str] = []

    def walker(root, visitor):
        def recording_visitor(path, is_dir, error):
            result = visitor(path, is_dir, error)
            if result is SKIP_DIR:
                skipped.append(path)
            return result

        walk(root, recording_visitor)

    assert find_weights(walker, root) == ([], [])
    assert [p.rsplit("/", 1)[-1] for p in skipped] == [".cache"]
