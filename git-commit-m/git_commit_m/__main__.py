"""`python -m git_commit_m` エントリーポイント"""

import sys

from git_commit_m.main import main

sys.exit(main())
