import sys

from rri_client.main import main

sys.exit(main())
