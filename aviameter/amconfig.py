#!/usr/bin/env python3

import os
import configparser
from types import SimpleNamespace

import logging
log = logging.getLogger(__name__)

DATA_DIR = os.path.join(os.path.expanduser("~"), ".aviameter-data")


class SectionParser(object):
    true = ['true', '1', 'yes', 'on']
    false = ['false', '0', 'no', 'off']

    def __init__(self, /, **kwargs):
        for k, v in kwargs.items():
            # Normalize to string for parsing while tolerating None
            sv = '' if v is None else str(v)
            s = sv.strip()

            # Detect booleans
            if s.lower() in self.true:
                parsed_val = True
            elif s.lower() in self.false:
                parsed_val = False
            else:
                parsed_val = s

            self.__dict__.update({k: parsed_val})

    def __repr__(self):
        items = (f"{k}={v!r}" for k, v in self.__dict__.items())
        return "{}({})".format(type(self).__name__, ", ".join(items))

    def __eq__(self, other):
        if isinstance(other, (SectionParser, SimpleNamespace)):
            return self.__dict__ == other.__dict__
        return NotImplemented


class AMConfig(object):

    _defaults = f"""
[general]
# Console log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
console_log_level = INFO
# File log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
file_log_level = DEBUG

[paths]
# Directory holding the stored flight path and reference track
data_dir = {os.path.join(DATA_DIR, "store")}
log_file = {os.path.join(DATA_DIR, "logs", "aviameter.log")}
# JSON list of airport records
airports_file = {os.path.join(DATA_DIR, "airports.json")}

[statistics]
# Number of recent samples averaged for speed and vertical speed
window_size = 10
# Track points at or below this altitude (meters) are ignored for ETA matching
eta_min_altitude = 1500.0

[route]
# Airport key, "<IATA> <name>" with spaces replaced by underscores
arrival_airport =
# Name of the stored reference track used for ETA
reference_track_name =

[flightdata]
# Local address for the statistics server
webui_host = 127.0.0.1
webui_port = 5000
"""

    def __init__(self, conf_file=None, save_defaults=True):
        self.config = configparser.ConfigParser(strict=False, allow_no_value=True, comment_prefixes='/')
        if not conf_file:
            self.conf_file = os.path.join(os.path.expanduser("~"), ".aviameter")
        else:
            self.conf_file = conf_file

        self.ready = self.load()

        # Save to update new defaults
        if save_defaults:
            self.save()

    def load(self):
        self.config.read_string(self._defaults)
        if os.path.isfile(self.conf_file):
            log.info(f"Config file found {self.conf_file} reading...")
            self.config.read(self.conf_file)
        else:
            log.info("No config file found. Using defaults...")

        self.get_config()
        return True

    def _load_defaults_parser(self):
        """Create a ConfigParser loaded with internal defaults."""
        defaults_cp = configparser.ConfigParser(strict=False, allow_no_value=True, comment_prefixes='/')
        defaults_cp.read_string(self._defaults)
        return defaults_cp

    def _is_value_valid_for_default(self, current_value, default_value):
        """Validate current_value against the type implied by default_value.

        Returns True if current_value looks valid for the default's type; False otherwise.
        """
        s = '' if current_value is None else str(current_value).strip()
        d = '' if default_value is None else str(default_value).strip()

        # If default is an empty string, accept any value (including empty)
        if d == '':
            return True

        # Boolean
        if d.lower() in (SectionParser.true + SectionParser.false):
            return s.lower() in (SectionParser.true + SectionParser.false)

        # Integer
        try:
            int(d)
            try:
                int(s)
                return True
            except ValueError:
                return False
        except ValueError:
            pass

        # Float
        try:
            float(d)
            try:
                float(s)
                return True
            except ValueError:
                return False
        except ValueError:
            pass

        # String (non-empty required to be considered valid)
        return s != ''

    def _sanitize_and_patch_config(self):
        """Ensure all values exist and are valid; fill with defaults and mark for patching if needed."""
        defaults_cp = self._load_defaults_parser()
        patched = False

        for sect in defaults_cp.sections():
            if not self.config.has_section(sect):
                self.config.add_section(sect)
                patched = True

            for key, def_val in defaults_cp.items(sect):
                has_opt = self.config.has_option(sect, key)
                cur_val = self.config.get(sect, key, fallback=None) if has_opt else None

                needs_default = not has_opt
                if not needs_default and (cur_val is None or str(cur_val).strip() == ''):
                    # Empty is only acceptable where the default is empty too
                    needs_default = str(def_val or '').strip() != ''
                if not needs_default:
                    # Validate type/format vs default
                    if not self._is_value_valid_for_default(cur_val, def_val):
                        log.warning(f"Invalid value {cur_val!r} for [{sect}] {key}, "
                                    f"using default {def_val!r}")
                        needs_default = True

                if needs_default:
                    if key.startswith('#'):
                        # Avoid trailing '=' in comment lines
                        self.config.set(sect, key, None)
                    else:
                        self.config.set(sect, key, '' if def_val is None else str(def_val))
                    patched = True

        self.patched = patched

    def get_config(self):
        # Pull info from ConfigParser object into AMConfig

        self._sanitize_and_patch_config()

        config_dict = {sect: SectionParser(**dict(self.config.items(sect))) for sect in
                self.config.sections()}
        self.__dict__.update(**config_dict)

        # Numbers come from the raw strings, "1" and "0" parse as booleans above
        self.statistics.window_size = max(1, self.config.getint('statistics', 'window_size'))
        self.statistics.eta_min_altitude = self.config.getfloat('statistics', 'eta_min_altitude')
        self.flightdata.webui_port = self.config.getint('flightdata', 'webui_port')

    def save(self):
        log.info("Saving config ... ")
        self.set_config()

        conf_dir = os.path.dirname(os.path.abspath(self.conf_file))
        if not os.path.isdir(conf_dir):
            os.makedirs(conf_dir)
        with open(self.conf_file, 'w') as h:
            self.config.write(h)
        log.info(f"Wrote config file: {self.conf_file}")

    def set_config(self):
        # Push info from AMConfig into ConfigParser object

        for sect in self.config.sections():
            section = self.__dict__.get(sect)
            if section is None:
                continue
            for k, v in section.__dict__.items():
                if k.startswith('#'):
                    continue
                self.config[sect][k] = str(v)
