import os
import pwd

import pytest

from oceandoc.fsutil import (
    FileInfo,
    copy,
    copy_file,
    create,
    create_file_with_size,
    create_symlink,
    exists,
    file_info,
    file_partition_count,
    file_size,
    load_file,
    mk_parent_dir,
    mkdir,
    remove,
    rename,
    set_update_time,
    sync_remote_symlink,
    sync_symlink,
    target_exists,
    truncate_file,
    update_time,
    write_at,
    write_file,
)


def test_write_and_load_round_trip(tmp_path):
    path = tmp_path / "sub" / "dir" / "f.bin"
    data = b"\x00\x01binary\xff"
    write_file(path, data)
    assert load_file(path) == data


def test_write_file_append_and_truncate_modes(tmp_path):
    path = tmp_path / "f.txt"
    write_file(path, "one")
    write_file(path, "two", append=True)
    assert load_file(path) == b"onetwo"
    write_file(path, "two")
    assert load_file(path) == b"two"


def test_write_at_overwrites_in_place(tmp_path):
    path = tmp_path / "f.txt"
    data = b"hello world"
    patch = b"HELLO"
    write_file(path, data)
    write_at(path, patch, 0)
    assert load_file(path) == patch + data[len(patch):]
    write_at(path, patch, len(data))
    assert load_file(path) == patch + data[len(patch):] + patch


def test_write_at_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        write_at(tmp_path / "missing", b"x", 0)


def test_file_size_and_missing(tmp_path):
    path = tmp_path / "f"
    data = b"x" * 37
    write_file(path, data)
    assert file_size(path) == len(data)
    with pytest.raises(FileNotFoundError):
        file_size(tmp_path / "nope")


def test_update_time_round_trip(tmp_path):
    path = tmp_path / "f"
    write_file(path, b"data")
    ts = 1_700_000_000_123
    set_update_time(path, ts)
    assert update_time(path) == ts


def test_file_info(tmp_path):
    path = tmp_path / "f"
    data = b"abcdef"
    write_file(path, data)
    ts = 1_600_000_000_500
    set_update_time(path, ts)
    info = file_info(path)
    assert isinstance(info, FileInfo)
    assert info.size == len(data)
    assert info.update_time == ts
    assert info.user == pwd.getpwuid(os.getuid()).pw_name
    assert info.group != ""


def test_exists_sees_dangling_symlink(tmp_path):
    link = tmp_path / "link"
    os.symlink(str(tmp_path / "gone"), str(link))
    assert exists(link) is True
    assert exists(tmp_path / "gone") is False


def test_target_exists(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    assert target_exists(src, dst) is True
    write_file(src, b"s")
    assert target_exists(src, dst) is False
    write_file(dst, b"d")
    assert target_exists(src, dst) is True


def test_mkdir_and_mk_parent_dir(tmp_path):
    nested = tmp_path / "a" / "b" / "c"
    mkdir(nested)
    assert nested.is_dir()
    mkdir(nested)
    assert nested.is_dir()
    child = tmp_path / "x" / "y" / "file"
    mk_parent_dir(child)
    assert child.parent.is_dir()
    assert not child.exists()


def test_mk_parent_dir_without_parent_raises():
    with pytest.raises(ValueError):
        mk_parent_dir("name")


def test_remove_tree_and_missing(tmp_path):
    root = tmp_path / "tree"
    write_file(root / "a" / "b.txt", b"x")
    assert remove(root) is True
    assert not root.exists()
    assert remove(root) is False


def test_create_makes_empty_file_and_keeps_existing(tmp_path):
    path = tmp_path / "new" / "file"
    create(path)
    assert path.is_file()
    assert file_size(path) == 0
    write_file(path, b"keep")
    create(path)
    assert load_file(path) == b"keep"


@pytest.mark.parametrize("bad", ["", "/some/dir/"])
def test_create_rejects_bad_paths(bad):
    with pytest.raises(ValueError):
        create(bad)


def test_rename(tmp_path):
    src = tmp_path / "a"
    dst = tmp_path / "b"
    write_file(src, b"content")
    rename(src, dst)
    assert not src.exists()
    assert load_file(dst) == b"content"
    with pytest.raises(FileNotFoundError):
        rename(src, dst)


def test_create_file_with_size(tmp_path):
    path = tmp_path / "sized"
    create_file_with_size(path, 4096)
    assert file_size(path) == 4096
    create_file_with_size(path, 10)
    assert file_size(path) == 4096


def test_create_symlink(tmp_path):
    target = tmp_path / "target"
    write_file(target, b"t")
    link = tmp_path / "link"
    create_symlink(link, target)
    assert os.readlink(link) == str(target)
    assert load_file(link) == b"t"


def test_copy_file_overwrite_and_refuse(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    write_file(src, b"new")
    write_file(dst, b"old")
    with pytest.raises(FileExistsError):
        copy_file(src, dst, overwrite=False)
    assert load_file(dst) == b"old"
    copy_file(src, dst)
    assert load_file(dst) == b"new"


def test_copy_directory_recursively(tmp_path):
    src = tmp_path / "src"
    write_file(src / "a.txt", b"a")
    write_file(src / "sub" / "b.txt", b"b")
    dst = tmp_path / "dst"
    copy(src, dst)
    assert load_file(dst / "a.txt") == b"a"
    assert load_file(dst / "sub" / "b.txt") == b"b"


def test_copy_file_into_directory(tmp_path):
    src = tmp_path / "f.txt"
    write_file(src, b"z")
    dst_dir = tmp_path / "dir"
    mkdir(dst_dir)
    copy(src, dst_dir)
    assert load_file(dst_dir / "f.txt") == b"z"


def test_truncate_file(tmp_path):
    path = tmp_path / "f"
    write_file(path, b"data")
    truncate_file(path)
    assert file_size(path) == 0
    missing = tmp_path / "missing"
    truncate_file(missing)
    assert not exists(missing)


def test_sync_symlink(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    mkdir(src / "sub")
    mkdir(dst)
    link = src / "sub" / "link"
    os.symlink("target_name", str(link))
    created = sync_symlink(str(src), str(dst), str(link))
    assert created == str(dst / "sub" / "link")
    assert os.readlink(created) == "target_name"
    # Syncing again replaces the existing link.
    created_again = sync_symlink(str(src), str(dst), str(link))
    assert os.readlink(created_again) == "target_name"


def test_sync_symlink_errors(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dst"
    mkdir(src)
    mkdir(dst)
    regular = src / "file"
    write_file(regular, b"x")
    with pytest.raises(ValueError):
        sync_symlink(str(src), str(dst), str(regular))
    outside = tmp_path / "outside"
    os.symlink("t", str(outside))
    with pytest.raises(ValueError):
        sync_symlink(str(src), str(dst), str(outside))


def test_sync_remote_symlink(tmp_path):
    src = tmp_path / "src"
    mkdir(src)
    link = src / "link"
    os.symlink("remote_target", str(link))
    assert sync_remote_symlink(str(src), str(link)) == "remote_target"
    write_file(src / "plain", b"x")
    with pytest.raises(ValueError):
        sync_remote_symlink(str(src), str(src / "plain"))


def test_file_partition_count(tmp_path):
    path = tmp_path / "f"
    size = 25
    ps = 10
    write_file(path, b"x" * size)
    n = file_partition_count(path, ps)
    assert (n - 1) * ps < size <= n * ps
    with pytest.raises(FileNotFoundError):
        file_partition_count(tmp_path / "missing", ps)