"""Website health check that restarts its EC2 instance when the site is down."""
