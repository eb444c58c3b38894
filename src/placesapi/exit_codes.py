"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~placesapi.exceptions.PlacesApiError` subclass.
Shell wrappers can inspect the exit code of the ``placesapi`` CLI to
determine the failure class without parsing stderr.

Example::

    $ placesapi nearby "48.8584,2.2945"
    $ echo $?
    2   # EXIT_INVALID_USAGE -- radius missing and rankby is not distance
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""No API key was configured."""

EXIT_UPSTREAM_ERROR = 5
"""The Places API answered with an error status (anything but OK / ZERO_RESULTS)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
