"""course-backup: course_backup/__main__.py.

Back up courses of a learning-management site from the command line.
"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())
