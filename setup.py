import os
import re

from setuptools import find_packages, setup

VERSION = '0.1.0'


def parse_md_readme():
    """
    pypi won't render markdown. After conversion to rst it will still not render unless raw directives are removed
    """
    try:
        from m2r import parse_from_file

        rst_lines = parse_from_file('README.md').split('\n')
        long_description = []
        i = 0
        while i < len(rst_lines):
            if re.match(r'^..\s+raw::.*', rst_lines[i]):
                i += 1
                while re.match(r'^(\s\s+|\t|$).*', rst_lines[i]):
                    i += 1
            else:
                long_description.append(re.sub('>`_ ', '>`__ ', rst_lines[i]))  # anonymous links
                i += 1
        long_description = '\n'.join(long_description)
    except (ImportError, OSError):
        long_description = ''
    return long_description


def check_nonpython_dependencies():
    """
    check that the non-python dependencies have been installed.

    Raises:
        OSError: A dependency is not installed
    """
    import shutil

    bwtool = (
        os.environ['COVMAT_BWTOOL']
        if 'COVMAT_BWTOOL' in os.environ and os.environ['COVMAT_BWTOOL']
        else 'bwtool'
    )
    for executable in [bwtool, 'bash']:
        pth = shutil.which(executable)
        if not pth:
            print('WARNING: {} is required. Missing executable: {}'.format(executable, executable))
        else:
            print('Found: {} at'.format(executable), pth)


TEST_REQS = [
    'timeout-decorator>=0.3.3',
    'coverage>=4.2',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'braceexpand==0.1.2',
    'numpy>=1.13.1',
    'pandas>=1.1',
    'shortuuid>=0.5.0',
    'snakemake>=6.0.0',
]

DEPLOY_REQS = ['twine', 'm2r', 'wheel']


setup(
    name='covmat',
    version='{}'.format(VERSION),
    packages=find_packages('src', exclude=['tests']),
    package_dir={'': 'src'},
    package_data={'covmat': ['schemas/*.json', 'data/*.sh']},
    description='Region by sample coverage matrices from bigWig files using bwtool',
    long_description=parse_md_readme(),
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS + DEPLOY_REQS,
        'deploy': DEPLOY_REQS,
    },
    tests_require=TEST_REQS,
    python_requires='>=3.9',
    test_suite='tests',
)
check_nonpython_dependencies()
