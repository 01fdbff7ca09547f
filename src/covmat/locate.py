"""
Strategies for resolving where the sample bigWig files can be read from. A single strategy is
selected per run, before any job starts
"""
import os
from typing import Callable, Dict, List, Optional

import pandas as pd

from .constants import LOCATION
from .error import ArtifactMissing, InvalidInput
from .util import logger, mkdirp

Downloader = Callable[[pd.DataFrame, str], None]
"""called with the manifest rows of the missing files and the directory to download them into"""

MANIFEST_COLUMNS = ['file_name', 'path', 'url']


class LocationResolver:
    """
    maps the rows of a sample manifest to the location of each track
    """

    NAME: Optional[str] = None

    def is_applicable(self, manifest: pd.DataFrame) -> bool:
        raise NotImplementedError('abstract method')

    def resolve(self, manifest: pd.DataFrame) -> List[str]:
        """
        Returns:
            the location of each track, in manifest order
        """
        raise NotImplementedError('abstract method')

    def __repr__(self):
        return '{}()'.format(self.__class__.__name__)


class ClusterPathResolver(LocationResolver):
    """
    read the tracks from the paths given in the manifest
    """

    NAME = LOCATION.LOCAL

    def is_applicable(self, manifest):
        return bool(len(manifest)) and all(
            isinstance(p, str) and os.path.exists(p) for p in manifest['path']
        )

    def resolve(self, manifest):
        missing = [p for p in manifest['path'] if not isinstance(p, str) or not os.path.exists(p)]
        if missing:
            raise ArtifactMissing('sample tracks do not exist', missing)
        return list(manifest['path'])


class MountedPathResolver(LocationResolver):
    """
    read the tracks from a local mount of the remote data, by replacing the url prefix with the mount point
    """

    NAME = LOCATION.MOUNTED

    def __init__(self, url_prefix: str, mount_prefix: Optional[str]):
        self.url_prefix = url_prefix
        self.mount_prefix = mount_prefix

    def rewrite(self, url: str) -> str:
        """
        Example:
            >>> MountedPathResolver('http://host/data/', '/mnt/data/').rewrite('http://host/data/s1.bw')
            '/mnt/data/s1.bw'
        """
        if url.startswith(self.url_prefix):
            return self.mount_prefix + url[len(self.url_prefix):]
        return url

    def is_applicable(self, manifest):
        if not self.mount_prefix or not len(manifest):
            return False
        return all(os.path.exists(self.rewrite(url)) for url in manifest['url'])

    def resolve(self, manifest):
        if not self.mount_prefix:
            raise InvalidInput('the mounted location strategy requires a mount prefix')
        paths = [self.rewrite(url) for url in manifest['url']]
        missing = [p for p in paths if not os.path.exists(p)]
        if missing:
            raise ArtifactMissing('sample tracks do not exist under the mount point', missing)
        return paths


class DownloadResolver(LocationResolver):
    """
    read the tracks from an output directory, downloading any missing files first
    """

    NAME = LOCATION.DOWNLOAD

    def __init__(self, outdir: Optional[str], downloader: Optional[Downloader] = None):
        self.outdir = outdir
        self.downloader = downloader

    def local_path(self, file_name: str) -> str:
        return os.path.join(self.outdir, 'bw', file_name)

    def is_applicable(self, manifest):
        return bool(self.outdir)

    def resolve(self, manifest):
        if not self.outdir:
            raise InvalidInput('the download location strategy requires an output directory')
        paths = [self.local_path(f) for f in manifest['file_name']]
        missing = [not os.path.exists(p) for p in paths]
        if any(missing):
            if self.downloader is None:
                raise ArtifactMissing(
                    'sample tracks are missing and no downloader was given',
                    [p for p, m in zip(paths, missing) if m],
                )
            logger.info(f'downloading {sum(missing)} sample tracks to {self.outdir}')
            mkdirp(os.path.join(self.outdir, 'bw'))
            self.downloader(manifest[missing], self.outdir)
            still_missing = [p for p in paths if not os.path.exists(p)]
            if still_missing:
                raise ArtifactMissing('sample tracks are missing after the download', still_missing)
        return paths


class RemoteResolver(LocationResolver):
    """
    pass the urls straight to bwtool, which reads the remote files
    """

    NAME = LOCATION.REMOTE

    def is_applicable(self, manifest):
        return True

    def resolve(self, manifest):
        return list(manifest['url'])


def check_manifest(manifest: pd.DataFrame) -> None:
    missing = [col for col in MANIFEST_COLUMNS if col not in manifest.columns]
    if missing:
        raise InvalidInput('missing required columns in the sample manifest', missing)


def select_resolver(
    manifest: pd.DataFrame, config: Dict, downloader: Optional[Downloader] = None
) -> LocationResolver:
    """
    choose how the sample tracks will be located for this run

    Args:
        manifest: the rows for the sample tracks (file_name, path, url columns)
        config: the validated config
        downloader: fetches missing files for the download strategy

    Returns:
        the configured resolver, or for 'auto' the first applicable of: cluster paths, mounted paths, download (if an output directory is configured), remote urls
    """
    check_manifest(manifest)
    resolvers = {
        LOCATION.LOCAL: ClusterPathResolver(),
        LOCATION.MOUNTED: MountedPathResolver(
            config['locate.url_prefix'], config['locate.mount_prefix']
        ),
        LOCATION.DOWNLOAD: DownloadResolver(config['locate.outdir'], downloader),
        LOCATION.REMOTE: RemoteResolver(),
    }
    strategy = config['locate.strategy']
    if strategy != 'auto':
        resolver = resolvers[LOCATION.enforce(strategy)]
    else:
        resolver = next(
            resolvers[name]
            for name in [LOCATION.LOCAL, LOCATION.MOUNTED, LOCATION.DOWNLOAD, LOCATION.REMOTE]
            if resolvers[name].is_applicable(manifest)
        )
    logger.info(f'locating the sample tracks using the {resolver.NAME} strategy')
    return resolver
