import datetime
import os
from typing import Iterable, Iterator, List, Optional, Sequence

import pandas as pd

from .constants import BED_PREFIX, STRAND
from .error import ArtifactMissing, InvalidInput
from .util import filepath, logger, mkdirp, write_bed_file

BED_COLUMNS = ['chr', 'start', 'end', 'name', 'score', 'strand']


class Region:
    """
    a genomic interval. Positions are 1-based and inclusive
    """

    def __init__(self, chr: str, start: int, end: int, strand: str = STRAND.NS, name: Optional[str] = None):
        self.chr = str(chr)
        self.start = int(start)
        self.end = int(end)
        self.strand = STRAND.enforce(strand)
        self.name = name
        if self.start < 1:
            raise InvalidInput('region start must be a positive integer', self.chr, self.start)
        if self.end < self.start:
            raise InvalidInput('region end must not precede the start', self.chr, self.start, self.end)

    def __len__(self):
        return self.end - self.start + 1

    def __eq__(self, other):
        if not isinstance(other, Region):
            return NotImplemented
        return self.key() == other.key()

    def __hash__(self):
        return hash(self.key())

    def key(self):
        return (self.chr, self.start, self.end, self.strand, self.name)

    def __repr__(self):
        return '{}({}:{}-{}{})'.format(
            self.__class__.__name__,
            self.chr,
            self.start,
            self.end,
            '' if self.strand == STRAND.NS else self.strand,
        )

    def to_bed(self):
        """
        the BED6 record for this region (0-based half-open coordinates)
        """
        return (
            self.chr,
            self.start - 1,
            self.end,
            self.name or '.',
            0,
            '.' if self.strand == STRAND.NS else self.strand,
        )


class RegionSet(Sequence):
    """
    ordered, immutable collection of regions. The order defines the rows of the coverage matrix
    """

    def __init__(self, regions: Iterable[Region]):
        self._regions = tuple(regions)
        if not self._regions:
            raise InvalidInput('the region set must contain at least one region')
        self._labels = tuple(
            region.name if region.name else 'region{}'.format(index + 1)
            for index, region in enumerate(self._regions)
        )

    def __getitem__(self, index):
        return self._regions[index]

    def __len__(self):
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(self._regions)

    def __repr__(self):
        return '{}(n={})'.format(self.__class__.__name__, len(self))

    @property
    def labels(self) -> List[str]:
        """
        the row labels: the region names, or region1..N by position for unnamed regions
        """
        return list(self._labels)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame.from_records(
            [(r.chr, r.start, r.end, r.strand) for r in self._regions],
            columns=['chr', 'start', 'end', 'strand'],
            index=pd.Index(self._labels, name='region'),
        )

    @classmethod
    def from_bed(cls, filename: str) -> 'RegionSet':
        """
        read a BED file (3 to 6 columns) into a region set, keeping the file order
        """
        df = read_bed(filename)
        regions = []
        for row in df.to_dict('records'):
            strand = row.get('strand')
            regions.append(
                Region(
                    row['chr'],
                    row['start'] + 1,
                    row['end'],
                    strand=strand if strand in {STRAND.POS, STRAND.NEG} else STRAND.NS,
                    name=row['name'] if row.get('name') not in {None, '.'} else None,
                )
            )
        return cls(regions)


BED_HEADER_WORDS = {'track', 'browser'}


def is_bed_header(line: str) -> bool:
    """
    comment, track and browser lines are not regions
    """
    fields = line.split()
    return bool(fields) and (fields[0].startswith('#') or fields[0] in BED_HEADER_WORDS)


def read_bed(filename: str) -> pd.DataFrame:
    """
    read a BED file, skipping comment, track and browser lines

    Raises:
        InvalidInput: the file is empty, has fewer than 3 columns, or non-integer coordinates
    """
    with open(filename, 'r') as fh:
        header_rows = [i for i, line in enumerate(fh) if is_bed_header(line)]
    try:
        df = pd.read_csv(
            filename,
            sep='\t',
            header=None,
            skiprows=header_rows,
            dtype=str,
            keep_default_na=False,
        )
    except pd.errors.EmptyDataError:
        raise InvalidInput('the BED file is empty', filename)
    if df.shape[1] < 3:
        raise InvalidInput('the BED file must have at least 3 columns', filename, df.shape[1])
    df = df.iloc[:, : len(BED_COLUMNS)]
    df.columns = BED_COLUMNS[: df.shape[1]]
    for col in ['start', 'end']:
        try:
            df[col] = df[col].astype(int)
        except ValueError:
            raise InvalidInput(f'non-integer {col} coordinate in the BED file', filename)
    return df


def materialize_bed(
    regions: RegionSet, sumsdir: str, bed: Optional[str] = None, overwrite: bool = False
) -> str:
    """
    Create (or re-use) the BED file shared by all the bwtool jobs

    Args:
        regions: the regions in matrix row order
        sumsdir: directory the BED file is created in when no explicit path is given
        bed: explicit path to a pre-built BED file. It is trusted to be in the same order as the regions and is never re-written
        overwrite: re-write the default BED file even if it exists

    Returns:
        str: the path to the BED file

    Raises:
        ArtifactMissing: the explicit BED file does not exist or the exported file was not created
        InvalidInput: the explicit BED file is malformed or does not have one record per region
    """
    if bed is not None:
        try:
            bed = filepath(bed)
        except TypeError as err:
            raise ArtifactMissing('the region BED file does not exist', bed) from err
        records = len(read_bed(bed))
        if records != len(regions):
            raise InvalidInput(
                f'the region BED file has {records} records but there are {len(regions)} regions', bed
            )
        logger.info(f'using the existing BED file: {bed}')
        return bed

    bed = os.path.join(sumsdir, '{}{}.bed'.format(BED_PREFIX, datetime.date.today().isoformat()))
    if not os.path.exists(bed) or overwrite:
        logger.info(f'creating the BED file: {bed}')
        mkdirp(sumsdir)
        write_bed_file(bed, [region.to_bed() for region in regions])
        if not os.path.exists(bed):
            raise ArtifactMissing('failed to create the region BED file', bed)
    return bed
