"""
Plugins package
===============

Every command of the tool is a plugin in this package.  To add a command,
create a module here that defines a subclass of
``enum_tool.core.BasePlugin`` with a non-empty ``command`` attribute.  The
plugin manager discovers and registers it automatically.

Commands provided out of the box:

* ``dir_enumerator`` – ``enum``: recursive directory enumeration with
  heuristic probing of common directory names.
* ``global_lister`` – ``ld``: flat recursive listing of server-provided
  directory indexes.
* ``port_scanner`` – ``scan``: quick check of a fixed set of common ports.
* ``simulations`` – ``inject``, ``auth_bypass``, ``spoof`` and
  ``payload_gen``: illustrative commands that only print static text.
* ``config_viewer`` – ``config``: shows the effective configuration.
"""

__all__ = [
    "dir_enumerator",
    "global_lister",
    "port_scanner",
    "simulations",
    "config_viewer",
]
