import json
import logging
import os

"""
Configuration of the defaults used when parsing RRULEs.

Settings may come from a config file (json, or yaml if pyyaml is
installed) and from environmental variables prepended with "ICALRULE_".
The environment takes precedence over the config file.

A config file holds named sections, and a section may inherit from
another one::

    {
        "default": {"default_tzid": "Etc/UTC"},
        "oslo": {"inherits": "default", "default_tzid": "Europe/Oslo"}
    }
"""

## UNTIL values without a zone are interpreted in this zone
DEFAULT_TZID = "Etc/UTC"

DEFAULTS = {
    "default_tzid": DEFAULT_TZID,
}

## Maps environmental variables to settings
ENVIRONMENT = {
    "ICALRULE_DEFAULT_TZID": "default_tzid",
}


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn, interactive_error=False):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/icalrule/icalrule.conf",
            f"{cfgdir}/icalrule/icalrule.yaml",
            f"{cfgdir}/icalrule/icalrule.json",
            "/etc/icalrule.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is external module,
            ## and not included in the requirements as for now.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.SafeLoader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        logging.info("no config file found")
    except ValueError:
        if interactive_error:
            logging.error(
                "error in config file.  It will be ignored, fix it before trying again",
                exc_info=True,
            )
        else:
            logging.error("error in config file.  It will be ignored", exc_info=True)
    return {}


def get_rrule_settings(section="default", config_file=None, environment=True):
    """
    Returns the settings for RRULE parsing as a dict that can be passed
    on as keyword arguments to :func:`icalrule.rrule.deserialize`::

        deserialize("FREQ=DAILY;UNTIL=20240101T090000", **get_rrule_settings())

    Keys in the config section that are not known settings are dropped.
    """
    settings = dict(DEFAULTS)
    config = read_config(config_file) or {}
    for key, value in config_section(config, section).items():
        if key in DEFAULTS:
            settings[key] = value
    if environment:
        for var, key in ENVIRONMENT.items():
            if os.environ.get(var):
                settings[key] = os.environ[var]
    return settings
