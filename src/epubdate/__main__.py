import sys

from epubdate.presentation.cli import main

if __name__ == '__main__':
    sys.exit(main())
