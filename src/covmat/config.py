import json
import os
from typing import Dict

from snakemake.exceptions import WorkflowError
from snakemake.utils import validate as snakemake_validate

CONFIG_SCHEMA = os.path.join(os.path.dirname(__file__), 'schemas', 'config.json')


def validate_config(config: Dict) -> Dict:
    """
    Check that the config conforms to the expected schema and fill in the default values

    Args:
        config: the flat config (ex. {'output.sumsdir': 'sums'})

    Returns:
        a validated copy of the config, with defaults added

    Raises:
        WorkflowError: the config does not match the schema
    """
    config = dict(config)
    try:
        snakemake_validate(config, CONFIG_SCHEMA, set_default=True)
    except Exception as err:
        short_msg = '. '.join(
            [line for line in str(err).split('\n') if line.strip()][:3]
        )  # these can get super long
        raise WorkflowError(short_msg)
    config['output.sumsdir'] = os.path.abspath(config['output.sumsdir'])
    return config


def load_config(filename: str) -> Dict:
    """
    read and validate a JSON config file
    """
    with open(filename, 'r') as fh:
        return validate_config(json.load(fh))
