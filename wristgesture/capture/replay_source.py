"""
Replay source for recorded sensor sessions.

Lets the detector run without hardware: samples come from a list or from
a CSV file with the columns

    channel,timestamp_ns,x,y,z

where channel is "rotation" or "acceleration". Comments after '#'
and an optional header row are ignored.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd

from wristgesture.core.errors import MalformedSampleError
from wristgesture.core.types import SensorChannel, SensorSample
from .sample_source import SampleSource

logger = logging.getLogger(__name__)

CSV_COLUMNS = ("channel", "timestamp_ns", "x", "y", "z")


class ReplaySampleSource(SampleSource):
    """Replays recorded samples synchronously through the started callbacks.

    Example:
        >>> source = ReplaySampleSource.from_csv("data/sample_session.csv")
        >>> source.start(SensorChannel.ROTATION, coordinator.on_sample)
        >>> source.replay()
    """

    def __init__(self, samples: Iterable[SensorSample],
                 available: Optional[Iterable[SensorChannel]] = None):
        super().__init__()
        self._samples: List[SensorSample] = sorted(samples, key=lambda s: s.timestamp_ns)
        if available is None:
            available = tuple(SensorChannel)
        self._available = frozenset(available)

    @classmethod
    def from_csv(cls, path: str,
                 available: Optional[Iterable[SensorChannel]] = None) -> "ReplaySampleSource":
        """Load a recorded session.

        Raises:
            MalformedSampleError: on a row that cannot be turned into a sample,
                with its data row number (header and comments not counted)
        """
        try:
            df = pd.read_csv(path, header=None, names=list(CSV_COLUMNS), comment="#",
                             index_col=False, skipinitialspace=True, dtype=str)
        except pd.errors.EmptyDataError:
            df = pd.DataFrame(columns=list(CSV_COLUMNS))
        except pd.errors.ParserError as e:
            raise MalformedSampleError(f"{path}: {e}") from e

        # Optional header row
        if len(df) and str(df.iloc[0]["channel"]).strip().lower() == CSV_COLUMNS[0]:
            df = df.iloc[1:]

        numeric = df[list(CSV_COLUMNS[1:])].apply(pd.to_numeric, errors="coerce")

        samples = []
        for row_no, (channel_name, (timestamp_ns, x, y, z)) in enumerate(
                zip(df["channel"], numeric.itertuples(index=False)), start=1):
            try:
                channel = SensorChannel.from_string(str(channel_name))
                if not np.isfinite(timestamp_ns):
                    raise MalformedSampleError("Invalid timestamp")
                samples.append(SensorSample.from_raw(channel, int(timestamp_ns), (x, y, z)))
            except MalformedSampleError as e:
                raise MalformedSampleError(f"Row {row_no}: {e}") from e
        logger.info("Loaded %d samples from %s", len(samples), path)
        return cls(samples, available)

    def is_available(self, channel: SensorChannel) -> bool:
        return channel in self._available

    def replay(self) -> int:
        """Deliver every recorded sample of the started channels, in time order.

        Returns:
            Number of samples delivered
        """
        delivered = 0
        for sample in self._samples:
            if self._deliver(sample.channel, sample.timestamp_ns, sample.values):
                delivered += 1
        logger.debug("Replayed %d of %d samples", delivered, len(self._samples))
        return delivered

    def __len__(self):
        return len(self._samples)
