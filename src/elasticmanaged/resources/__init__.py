"""包内置的设置文件资源."""
