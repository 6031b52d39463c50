import sys

from torch_sqat.cli import main

sys.exit(main())
