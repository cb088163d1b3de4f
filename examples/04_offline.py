"""
Offline downloads - let the server fetch URLs into a cloud folder
"""
import asyncio
from clouddrivepy import APIConfig, CloudDriveClient, TimeoutConfig


async def main():
    # Longer login timeout for a slow server
    config = APIConfig(timeout=TimeoutConfig(login=15.0))

    async with CloudDriveClient("nas.local:19798", "user@example.com", "password",
                                config=config, offline_folder="/115/offline") as drive:

        paths = await drive.add_offline_files([
            "https://example.com/ubuntu.iso",
            "magnet:?xt=urn:btih:0123456789abcdef0123456789abcdef01234567",
        ])
        print(f"Submitted: {paths}")

        backend = (await drive.list_clouds())[0]
        page = await drive.list_offline_files(backend.name, backend.user_name)
        for task in page.files:
            print(f"{task.name}: {task.status.name} {task.percent_done:.1f}%")


if __name__ == "__main__":
    asyncio.run(main())
