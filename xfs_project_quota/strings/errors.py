def xfs_path_missing(xfs_path):
    return f"xfs path {xfs_path} does not exist"


def xfs_type_check_failed(xfs_path, details):
    return f"error checking if xfs path {xfs_path} is an XFS filesystem: {details}"


def not_xfs_filesystem(xfs_path, fs_type):
    return f"xfs path {xfs_path} is not an XFS filesystem (detected {fs_type!r})"


def mount_table_unreadable(mounts_path, details):
    return f"unable to read mount table {mounts_path}: {details}"


def mount_entry_not_found(mount_point, fs_type):
    return f"mount entry for mountpoint {mount_point}, fstype {fs_type} not found"


def project_quota_not_enabled(xfs_path):
    return f"xfs path {xfs_path} was not mounted with pquota nor prjquota"


def quota_binary_missing(binary):
    return f"quota tool {binary!r} was not found on PATH"


def invalid_directory(directory):
    return f"invalid project directory {directory!r}: must be non-empty and contain no whitespace"


def invalid_bhard(bhard):
    return f"invalid hard limit {bhard!r}: must be non-empty and contain no ':' or whitespace"


def projects_file_create_failed(path, details):
    return f"error creating xfs projects file {path}: {details}"


def projects_file_read_failed(path, details):
    return f"error reading xfs projects file {path}: {details}"


def projects_file_write_failed(path, details):
    return f"error writing xfs projects file {path}: {details}"


def project_block_add_failed(block, path, details):
    return f"error adding project block {block!r} to projects file {path}: {details}"


def project_ids_exhausted(maximum):
    return f"all {maximum} xfs project ids are allocated"


def project_not_added(project_id):
    return f"project with id {project_id} has not been added"


def quota_command_failed(command, returncode, output):
    return f"xfs_quota failed with exit status {returncode}: {command}, output: {output}"


def quota_command_timeout(command, timeout_seconds):
    return f"xfs_quota timed out after {timeout_seconds:.1f}s: {command}"


def quota_command_unavailable(binary):
    return f"quota tool not available: {binary}"


def restore_failed(directory, details):
    return f"error restoring quota for directory {directory}: {details}"


def restore_from_file_failed(path, details):
    return f"error restoring quotas from projects file {path}: {details}"


def quota_command_os_error(binary, details):
    return f"unable to run quota tool {binary}: {details}"
