import os
import shutil
import stat

import pytest

from covmat.region import Region, RegionSet

bash_only = pytest.mark.skipif(not shutil.which('bash'), reason='missing the command')

INVOCATION_LOG = 'invocations.log'

# stands in for sum.sh. The "bigwig" given is a file of pre-computed sums which is copied to the output
FAKE_SUM_SCRIPT = """#!/bin/bash
echo "$3" >> "$(dirname "$0")/invocations.log"
if [[ "$(basename "$3")" == *fail* ]]; then
    echo "error: unable to open $3" >&2
    exit 1
fi
if [[ "$(basename "$3")" == *noop* ]]; then
    exit 0
fi
cp "$3" "$4"
"""


def write_fake_script(dirname):
    os.makedirs(dirname, exist_ok=True)
    script = os.path.join(dirname, 'fake_sum.sh')
    with open(script, 'w') as fh:
        fh.write(FAKE_SUM_SCRIPT)
    os.chmod(script, os.stat(script).st_mode | stat.S_IEXEC)
    return script


def invocations(script):
    log = os.path.join(os.path.dirname(script), INVOCATION_LOG)
    if not os.path.exists(log):
        return []
    with open(log, 'r') as fh:
        return [line.strip() for line in fh if line.strip()]


def write_sums(filename, values, chrom='chr1'):
    os.makedirs(os.path.dirname(filename), exist_ok=True)
    with open(filename, 'w') as fh:
        for i, value in enumerate(values):
            fh.write(f'{chrom}\t{i * 100}\t{i * 100 + 50}\t{value}\n')
    return filename


def mock_regions(n=3, named=False):
    return RegionSet(
        [
            Region('chr1', i * 100 + 1, i * 100 + 50, name=f'peak{i + 1}' if named else None)
            for i in range(n)
        ]
    )
