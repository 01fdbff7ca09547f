import errno
import logging
import os
import time
from glob import glob
from typing import Iterable, List, Optional

from braceexpand import braceexpand

logger = logging.getLogger('covmat')


def bash_expands(*expressions: str) -> List[str]:
    """
    expand a file glob expression, allowing bash-style brackets.

    Returns:
        a list of files

    Example:
        >>> bash_expands('./{test,doc}/*py')
        [...]
    """
    result = []
    for expression in expressions:
        eresult = []
        for name in braceexpand(expression):
            for fname in glob(name):
                eresult.append(fname)
        if not eresult:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(eresult)
    return [os.path.abspath(f) for f in result]


def filepath(path: str) -> str:
    """
    expand a path expression which must match exactly one existing file
    """
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise TypeError('File does not exist', path)
    else:
        if len(file_list) > 1:
            raise TypeError('File pattern match multiple files and expected only one', path)
    return file_list[0]


def mkdirp(dirname: str) -> str:
    """
    Make a directory or path of directories. Suppresses the error that is normally raised when the directory already exists
    """
    logger.info(f"creating output directory: '{dirname}'")
    try:
        os.makedirs(dirname)
    except OSError as exc:  # Python >2.5: http://stackoverflow.com/questions/600268/mkdir-p-functionality-in-python
        if exc.errno == errno.EEXIST and os.path.isdir(dirname):
            pass
        else:
            raise exc
    return dirname


def write_bed_file(filename: str, bed_rows: Iterable) -> None:
    logger.info(f'writing: {filename}')
    with open(filename, 'w') as fh:
        for bed in bed_rows:
            fh.write('\t'.join([str(c) for c in bed]) + '\n')


def format_run_time(start_time: int, end_time: Optional[int] = None) -> str:
    """
    Example:
        >>> format_run_time(0, 3725)
        '1:02:05'
    """
    if end_time is None:
        end_time = int(time.time())
    duration = end_time - start_time
    hours = duration - duration % 3600
    minutes = duration - hours - (duration - hours) % 60
    seconds = duration - hours - minutes
    return '{}:{:02d}:{:02d}'.format(hours // 3600, minutes // 60, seconds)
