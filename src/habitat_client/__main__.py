import sys

from habitat_client.cli import main

sys.exit(main())
