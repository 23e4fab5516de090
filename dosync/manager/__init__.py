"""Rolling update manager, its configuration, recovery handling and errors."""