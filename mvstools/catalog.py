"""Dataset catalog: VTOC records, PDS directories and a filesystem-backed store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import IO, BinaryIO, Callable, Iterable, Iterator

EBCDIC = "cp037"

DSCB_LENGTH = 96
FORMAT1_ID = 0xF1  # EBCDIC '1'
DSORG_PS = 0x40
DSORG_PO = 0x02

FIRST_YEAR = 1970
YEAR_SPAN = 250
SECONDS_PER_DAY = 24 * 60 * 60

MAX_MEMBERS = 3000
DIRECTORY_BLOCK = 256
BLOCK_PREFIX = 2
END_MARK = b"\xff" * 8
SKIP_MASK = 0x1F
ENTRY_HEADER = 12


class Org(IntEnum):
    """Dataset organisation."""

    PS = 1
    PO = 2


@dataclass(frozen=True)
class Dataset:
    """A catalogued dataset: name, creation date (seconds since 1970) and organisation."""

    name: str
    date: int
    org: Org


def leap_days(year: int) -> int:
    """Return the number of days from 1 January 1970 to 1 January of ``year``."""
    if not FIRST_YEAR <= year <= FIRST_YEAR + YEAR_SPAN:
        raise ValueError(f"year {year} outside {FIRST_YEAR}..{FIRST_YEAR + YEAR_SPAN}")
    return sum(366 if y & 3 == 0 else 365 for y in range(FIRST_YEAR, year))


def parse_dscb(record: bytes) -> Dataset | None:
    """Decode a 96-byte format-1 DSCB; return None for records that are not PS or PO datasets."""
    if len(record) < DSCB_LENGTH:
        raise ValueError(f"DSCB record must be {DSCB_LENGTH} bytes, got {len(record)}")
    if record[44] != FORMAT1_ID or record[82] not in (DSORG_PS, DSORG_PO):
        return None
    name = record[:44].decode(EBCDIC).rstrip(" ")
    org = Org.PS if record[82] == DSORG_PS else Org.PO
    year_byte = record[75]
    year = year_byte + (1900 if year_byte >= 70 else 2000)
    day_of_year = (record[76] << 8) + record[77]
    days = leap_days(year) + day_of_year - 1
    return Dataset(name=name, date=days * SECONDS_PER_DAY, org=org)


def read_vtoc(stream: BinaryIO) -> Iterator[Dataset]:
    """Yield every PS or PO dataset found in a stream of DSCB records."""
    while True:
        record = stream.read(DSCB_LENGTH)
        if len(record) != DSCB_LENGTH:
            return
        dataset = parse_dscb(record)
        if dataset is not None:
            yield dataset


def parse_pds_directory(stream: BinaryIO) -> list[str]:
    """Return the member names held in a partitioned dataset's directory blocks."""
    names: list[str] = []
    stream.read(BLOCK_PREFIX)
    while True:
        block = stream.read(DIRECTORY_BLOCK)
        if len(block) != DIRECTORY_BLOCK:
            return names
        used = int.from_bytes(block[:2], "big")
        offset = 2
        while offset < used:
            entry = block[offset:offset + ENTRY_HEADER]
            if entry[:8] == END_MARK:
                return names
            if len(entry) < ENTRY_HEADER:
                break
            if len(names) == MAX_MEMBERS:
                return names
            names.append(entry[:8].decode(EBCDIC).rstrip(" "))
            skip = (entry[11] & SKIP_MASK) * 2
            offset += ENTRY_HEADER + skip
        stream.read(BLOCK_PREFIX)


class Catalog:
    """Cached list of datasets, reloaded on demand from a loader callable."""

    def __init__(self, loader: Callable[[], Iterable[Dataset]]) -> None:
        self._loader = loader
        self._datasets: list[Dataset] = []

    def refresh(self) -> bool:
        """Reload the dataset list; on an I/O failure keep the old list and return False."""
        try:
            datasets = list(self._loader())
        except OSError:
            return False
        self._datasets = datasets
        return True

    def find(self, name: str) -> Dataset | None:
        """Return the dataset with this name, compared without regard to case."""
        wanted = name.upper()
        return next((d for d in self._datasets if d.name.upper() == wanted), None)

    def org_of(self, name: str) -> Org | None:
        """Return the organisation of a dataset, or None when it is not catalogued."""
        dataset = self.find(name)
        return dataset.org if dataset else None

    def __iter__(self) -> Iterator[Dataset]:
        return iter(list(self._datasets))

    def __len__(self) -> int:
        return len(self._datasets)


def _locate(directory: Path, name: str) -> Path | None:
    wanted = name.upper()
    try:
        entries = sorted(directory.iterdir())
    except FileNotFoundError:
        return None
    return next((p for p in entries if p.name.upper() == wanted), None)


class DirectoryStore:
    """Datasets kept in a directory: files are sequential, sub-directories partitioned."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def datasets(self) -> list[Dataset]:
        """Return every dataset in the store, sorted by name."""
        found = []
        for path in self.root.iterdir():
            if path.is_dir():
                org = Org.PO
            elif path.is_file():
                org = Org.PS
            else:
                continue
            day = int(path.stat().st_mtime) // SECONDS_PER_DAY * SECONDS_PER_DAY
            found.append(Dataset(name=path.name.upper(), date=day, org=org))
        return sorted(found, key=lambda d: d.name)

    def members(self, name: str) -> list[str]:
        """Return the member names of a partitioned dataset, sorted."""
        path = _locate(self.root, name)
        if path is None:
            raise FileNotFoundError(name)
        if not path.is_dir():
            raise NotADirectoryError(name)
        names = sorted(p.name.upper() for p in path.iterdir() if p.is_file())
        return names[:MAX_MEMBERS]

    def open(self, name: str, member: str | None = None, mode: str = "rb") -> IO:
        """Open a sequential dataset, or a member of a partitioned one."""
        writing = any(flag in mode for flag in "wax")
        dataset = _locate(self.root, name)
        if member is None:
            if dataset is None:
                if not writing:
                    raise FileNotFoundError(name)
                dataset = self.root / name.upper()
            if dataset.is_dir():
                raise IsADirectoryError(name)
            return open(dataset, mode)
        if dataset is None:
            raise FileNotFoundError(name)
        if not dataset.is_dir():
            raise NotADirectoryError(name)
        path = _locate(dataset, member)
        if path is None:
            if not writing:
                raise FileNotFoundError(f"{name}({member})")
            path = dataset / member.upper()
        return open(path, mode)