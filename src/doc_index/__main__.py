import sys

from doc_index.cli import main


sys.exit(main())
