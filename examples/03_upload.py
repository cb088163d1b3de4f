"""
Upload files
"""
import asyncio
from clouddrivepy import CloudDriveClient


async def main():
    async with CloudDriveClient("127.0.0.1:19798", "user@example.com", "password",
                                upload_folder="/115/upload") as drive:

        # Simple upload to the upload folder
        result = await drive.upload("document.pdf")
        print(f"Uploaded: {result.remote_path}")

        # Upload with custom name and folder
        result = await drive.upload("photo.jpg", name="vacation_2024.jpg", dest="/115/photos")
        print(f"Uploaded as: {result.remote_path}")

        # Upload with progress callback
        def on_progress(progress):
            print(f"Progress: {progress.percentage:.1f}%")

        result = await drive.upload("large_file.zip", progress_callback=on_progress)
        print(f"Uploaded {result.bytes_written} bytes in {result.chunks} chunks")


if __name__ == "__main__":
    asyncio.run(main())
