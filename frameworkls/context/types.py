from enum import Enum


class Partition(Enum):
    """Side of the game a module runs on."""

    CLIENT = "Client"
    SERVER = "Server"
    UNKNOWN = "Unknown"  # documents outside both partition directories
