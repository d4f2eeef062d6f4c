from pathlib import PurePath

from frameworkls.context.types import Partition
from frameworkls.settings import Settings


class PartitionClassifier:
    """
    Classifies file paths into Client / Server partitions.

    Classification works on whole path segments, so a folder such as
    ``ServerTools`` or a file named ``ClientUtils.lua`` is never mistaken
    for a partition directory.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self._by_marker = {
            self.settings.client_marker: Partition.CLIENT,
            self.settings.server_marker: Partition.SERVER,
        }

    def marker_partition(self, segment: str) -> Partition:
        """Partition named by a single directory segment."""
        return self._by_marker.get(segment, Partition.UNKNOWN)

    def classify(self, path: PurePath | str) -> Partition:
        """
        Classify a document path.

        Priority:
        1. A marker directory directly below the source directory
           (``.../src/Client/...``), last occurrence wins
        2. The first marker directory anywhere in the path
        3. UNKNOWN
        """
        # Drop the file name, only directories can be partition markers
        segments = PurePath(path).parts[:-1]

        for index in range(len(segments) - 1, 0, -1):
            if segments[index - 1] == self.settings.source_dir:
                partition = self.marker_partition(segments[index])
                if partition is not Partition.UNKNOWN:
                    return partition

        for segment in segments:
            partition = self.marker_partition(segment)
            if partition is not Partition.UNKNOWN:
                return partition

        return Partition.UNKNOWN
