"""Shared constants for lxcmigrate."""

DEFAULT_LXC_ROOT = "/var/lib/lxc"
CONFIG_FILE_NAME = "config"
ROOTFS_DIR_NAME = "rootfs"

DEFAULT_CONFIG_FILE = ".lxcmigrate.yml"
DEFAULT_MANIFEST_FILE = "lxcmigrate-manifest.json"

DEFAULT_SSH_PORT = 22

RSYNC_BASE_ARGS = ("-aHAX", "--numeric-ids", "--delete")
