"""HTTP value types: headers, methods, query parameters, request, response envelope."""
