"""
Basic usage - Login, list cloud storages and a directory
"""
import asyncio
from clouddrivepy import CloudDriveClient


async def main():
    async with CloudDriveClient("127.0.0.1:19798", "user@example.com", "password") as drive:

        # Cloud storages aggregated by the server
        for backend in await drive.list_clouds():
            print(f"Cloud: {backend}")

        # List root
        print("\nFiles in /:")
        for entry in await drive.list_directory("/"):
            print(f"  {entry}")

        # Look up one entry
        entry = await drive.find_file("/115/docs/a.txt")
        print(f"\n{entry.full_path}: {entry.size} bytes")


if __name__ == "__main__":
    asyncio.run(main())
