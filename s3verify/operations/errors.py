"""
s3verify.operations.errors
~~~~~~~~~~~~~~~~~~~~~~~~~~

Decoding of S3 XML error bodies.
"""

try:
    import lxml.etree as ET

    XML_PARSER = "lxml"
except ImportError:
    import xml.etree.ElementTree as ET

    XML_PARSER = "builtin"

from ..exceptions import ProtocolError

_FIELDS = {
    "Code": "code",
    "Message": "message",
    "BucketName": "bucket_name",
    "Key": "key",
    "RequestId": "request_id",
    "HostId": "host_id",
}


def _local_name(tag):
    # Strip an XML namespace, {ns}Code -> Code
    return tag.rsplit("}", 1)[-1] if isinstance(tag, str) else ""


class ErrorResponse(object):
    """
    An S3 error as returned in a non-2xx response body.

    Args:
        code (str): S3 error code, e.g. ``NoSuchKey``
        message (str): Human readable message
        bucket_name (str): Bucket the error refers to
        key (str): Object key the error refers to
        request_id (str): Server request id
        host_id (str): Server host id
        status_code (int): HTTP status of the response
    """

    def __init__(
        self,
        code="",
        message="",
        bucket_name="",
        key="",
        request_id="",
        host_id="",
        status_code=None,
    ):
        self.code = code
        self.message = message
        self.bucket_name = bucket_name
        self.key = key
        self.request_id = request_id
        self.host_id = host_id
        self.status_code = status_code

    @classmethod
    def from_xml(cls, content, status_code=None):
        """
        Parse an ``<Error>`` document.

        Raises:
            ProtocolError: If ``content`` is not an S3 error document
        """
        try:
            root = ET.fromstring(content)
        except (ET.ParseError, ValueError) as e:
            raise ProtocolError("malformed error response: {0}".format(e))
        if _local_name(root.tag) != "Error":
            raise ProtocolError(
                "unexpected error response root element: {0}".format(root.tag)
            )

        values = {}
        for child in root:
            field = _FIELDS.get(_local_name(child.tag))
            if field:
                values[field] = (child.text or "").strip()
        return cls(status_code=status_code, **values)

    @classmethod
    def from_status(cls, status_code, reason="", bucket_name="", key=""):
        """Synthesize an error for a response without a body, e.g. to HEAD."""
        if status_code == 404:
            if key:
                code, message = "NoSuchKey", "The specified key does not exist."
            else:
                code, message = "NoSuchBucket", "The specified bucket does not exist."
        elif status_code == 403:
            code, message = "AccessDenied", "Access Denied."
        elif status_code == 409:
            code, message = "Conflict", "Bucket not empty."
        else:
            status = "{0} {1}".format(status_code, reason).strip()
            code, message = status, status
        return cls(
            code=code,
            message=message,
            bucket_name=bucket_name,
            key=key,
            status_code=status_code,
        )

    @classmethod
    def from_response(cls, response, bucket_name="", key=""):
        """
        Decode the error carried by a ``requests`` response.

        Reading ``response.content`` buffers the body, so it stays readable
        by the caller afterwards.

        Raises:
            ProtocolError: If the body is present but not an S3 error document
        """
        content = response.content
        if not content or not content.strip():
            return cls.from_status(
                response.status_code, response.reason or "", bucket_name, key
            )
        error = cls.from_xml(content, response.status_code)
        error.bucket_name = error.bucket_name or bucket_name
        error.key = error.key or key
        return error

    def __str__(self):
        return "{0}: {1}".format(self.code, self.message)

    def __repr__(self):
        return "<ErrorResponse code={0!r} status={1!r}>".format(
            self.code, self.status_code
        )
