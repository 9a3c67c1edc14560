import os

# quiet logging and no log files while testing
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("BULK_DELAY_SECONDS", "0")
