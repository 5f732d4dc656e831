# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Base exception shared by every provisioner error.

Concrete errors live next to the code that raises them (``ConfigError`` in
``provisioner.config``, ``CommandError`` in ``provisioner.executor`` and so
on).  Catch ``ProvisionerError`` to handle any failure of this library.
"""


class ProvisionerError(Exception):
    """Base exception for all provisioner errors."""
