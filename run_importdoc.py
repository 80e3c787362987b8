"""
    The only purpose of this tiny file is to call
    the local module pg_importdoc easily.

    You can call the module with this command:

        $ python3 run_importdoc.py [OPTION]... DBNAME

    instead of:
        $ python3 -m pg_importdoc [OPTION]... DBNAME
"""
import sys

import pg_importdoc

sys.exit(pg_importdoc.main())
