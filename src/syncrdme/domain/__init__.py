"""Domain layer: marker protocol, rustdoc link resolution and configuration."""
