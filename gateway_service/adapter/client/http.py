import httpx


async def get_json(
    url: str,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
    timeout_s: float = 5.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict:
    async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response.json()
