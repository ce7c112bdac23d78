import sys

from ai_notifier.dispatch import main

sys.exit(main())
