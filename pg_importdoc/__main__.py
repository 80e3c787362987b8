"""
    Entrypoint of the module. Let user invoke this module
    by writting in the console:
        $ python3 -m pg_importdoc [OPTION]... DBNAME

    INPUT
        A document read from a file (-f) or stdin. The content is
        sent untouched, the server validates it.
    OUTPUT
        The first column of the first row returned by the command,
        if any.
"""
import sys

from . import main

sys.exit(main())
