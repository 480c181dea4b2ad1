"""Request builders for build-upload resources."""

from __future__ import annotations

from ..connect.http import HttpRequest


def create_build_upload_request(app_id: str, version: str, build_number: str, platform: str) -> HttpRequest:
    return HttpRequest(
        method="POST",
        path="/v1/buildUploads",
        body={
            "data": {
                "type": "buildUploads",
                "attributes": {
                    "cfBundleShortVersionString": version,
                    "cfBundleVersion": build_number,
                    "platform": platform,
                },
                "relationships": {"app": {"data": {"type": "apps", "id": app_id}}},
            }
        },
    )


def create_build_upload_file_request(
    build_upload_id: str,
    file_name: str,
    file_size: int,
    uti: str,
    asset_type: str,
) -> HttpRequest:
    return HttpRequest(
        method="POST",
        path="/v1/buildUploadFiles",
        body={
            "data": {
                "type": "buildUploadFiles",
                "attributes": {
                    "assetType": asset_type,
                    "fileName": file_name,
                    "fileSize": file_size,
                    "uti": uti,
                },
                "relationships": {
                    "buildUpload": {"data": {"type": "buildUploads", "id": build_upload_id}},
                },
            }
        },
    )


def mark_build_upload_file_uploaded_request(file_id: str, sha256: str, md5: str) -> HttpRequest:
    return HttpRequest(
        method="PATCH",
        path=f"/v1/buildUploadFiles/{file_id}",
        body={
            "data": {
                "type": "buildUploadFiles",
                "id": file_id,
                "attributes": {
                    "sourceFileChecksums": {
                        "file": {"hash": sha256, "algorithm": "SHA_256"},
                        "composite": {"hash": md5, "algorithm": "MD5"},
                    },
                    "uploaded": True,
                },
            }
        },
    )


def get_build_upload_request(build_upload_id: str) -> HttpRequest:
    return HttpRequest(
        method="GET",
        path=f"/v1/buildUploads/{build_upload_id}",
        query={"fields[buildUploads]": "state"},
    )
