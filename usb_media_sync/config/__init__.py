"""Configuration loading for usb-media-sync."""
