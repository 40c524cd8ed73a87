import sys

from pipe_pricing.main import main

sys.exit(main())
