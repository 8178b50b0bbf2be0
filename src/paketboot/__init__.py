"""paketboot: resolves, downloads and caches the latest paket.exe."""
