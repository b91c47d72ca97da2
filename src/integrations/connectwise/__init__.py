"""ConnectWise PSA integration."""
