"""
Refresh directory trees so the server re-reads them from the clouds
"""
import asyncio
from clouddrivepy import CloudDriveClient


async def main():
    async with CloudDriveClient("http://nas.local:19798", "user@example.com", "password") as drive:

        # Follow the walk
        drive.on('directory_refreshed', lambda o: print(f"  ok   {o.path} ({o.child_count})"))
        drive.on('directory_skipped', lambda o: print(f"  skip {o.path}"))
        drive.on('directory_failed', lambda o, error: print(f"  fail {o.path}: {error}"))

        # One subtree, skipping what does not need a refresh
        report = await drive.refresh_tree("/115", exclusions=["/115/tmp"])
        print(report.summary())

        # Single directories, not recursive
        results = await drive.refresh_directories(["/115/movies", "/Aliyundrive/shows"])
        for path, result in results.items():
            print(f"{path}: {result}")

        # Everything, once per cloud storage
        for backend, report in await drive.refresh_all(exclusions=["/tmp"]):
            print(f"{backend.name}: {report.summary()}")


if __name__ == "__main__":
    asyncio.run(main())
