"""VMware vSphere actions."""
