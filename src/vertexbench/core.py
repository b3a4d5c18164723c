# OAuth scope requested for service account credentials
CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

# Deadline (seconds) applied to every remote call unless overridden
DEFAULT_TIMEOUT = 60.0

# Baseline Workbench instance shape
# Internal IP only: created instances never get a public address.
DEFAULT_MACHINE_TYPE = "e2-standard-4"
DEFAULT_IMAGE_REPOSITORY = "gcr.io/deeplearning-platform-release/workbench-container"
DEFAULT_IMAGE_TAG = "latest"
DEFAULT_NETWORK = "global/networks/default"
DEFAULT_PUBLIC_IP_ENABLED = False

# Bounds for the operation watcher
# Provisioning usually takes a few minutes, so give it ten.
DEFAULT_WAIT_TIMEOUT = 600.0
DEFAULT_POLL_INTERVAL = 5.0
MAX_POLL_INTERVAL = 30.0
# Floor for a poll's deadline once the wait bound is nearly spent
MIN_CALL_TIMEOUT = 1.0

ACCESS_URL_SCHEME = "https://"
