import httpx
import asyncio
import sys
import uuid

BASE_URL = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"

async def run_verification():
    print(f"🚀  Starting Verification against {BASE_URL}...\n")

    async with httpx.AsyncClient(base_url=BASE_URL, timeout=10.0) as client:
        # 1. Health Check
        print("1. [Health] Checking /health...")
        try:
            resp = await client.get("/health")
            if resp.status_code == 200 and resp.json() == {"status": "ok"}:
                print("   ✅  Health Check Passed")
            else:
                print(f"   ❌  Health Check Failed: {resp.text}")
                return
        except httpx.HTTPError as e:
            print(f"   ❌  Connection Error: {e}")
            return

        # 2. Register an owner
        print("\n2. [Auth] Registering account...")
        email = f"verify-{uuid.uuid4().hex[:8]}@example.com"
        resp = await client.post("/api/auth/register", json={"email": email, "password": "Verify123"})
        if resp.status_code != 201:
            print(f"   ❌  Register Failed: {resp.status_code} {resp.text}")
            return
        headers = {"Authorization": f"Bearer {resp.json()['data']['token']}"}
        print(f"   ✅  Registered {email}")

        # 3. Create Link
        print("\n3. [API] Creating Short Link...")
        long_url = "https://www.example.com"
        resp = await client.post("/api/urls/shorten", json={"original_url": long_url, "title": "verify"}, headers=headers)
        if resp.status_code == 201:
            data = resp.json()["data"]
            link_id, short_code = data["id"], data["short_code"]
            print(f"   ✅  Created: {data['short_url']}")
        else:
            print(f"   ❌  Create Failed: {resp.status_code} {resp.text}")
            return

        # 4. Verify Redirect
        print("\n4. [API] Verifying Redirect...")
        resp = await client.get(f"/{short_code}", follow_redirects=False)
        if resp.status_code == 302 and resp.headers.get("location") == long_url:
            print(f"   ✅  Redirect Location matches: {resp.headers['location']}")
        else:
            print(f"   ❌  Redirect Failed: {resp.status_code} {resp.headers.get('location')}")

        # 5. Verify Stats
        print("\n5. [API] Verifying Stats...")
        resp = await client.get(f"/api/urls/{link_id}/stats", headers=headers)
        if resp.status_code == 200:
            clicks = resp.json()["data"]["total_clicks"]
            if clicks > 0:
                print(f"   ✅  Click Count updated: {clicks}")
            else:
                print(f"   ⚠️  Click Count not updated (Background task might be slow): {clicks}")
        else:
            print(f"   ❌  Stats Failed: {resp.status_code}")

        # 6. Soft delete
        print("\n6. [API] Verifying Delete...")
        await client.delete(f"/api/urls/{link_id}", headers=headers)
        resp = await client.get(f"/{short_code}", follow_redirects=False)
        if resp.status_code == 404:
            print("   ✅  Deleted link no longer resolves")
        else:
            print(f"   ❌  Deleted link still answers {resp.status_code}")

        # 7. Metrics
        print("\n7. [Observability] Verifying Metrics...")
        resp = await client.get("/metrics")
        if resp.status_code == 200 and "redirect_total" in resp.text:
            print("   ✅  Metrics Endpoint Exposed")
        else:
            print(f"   ❌  Metrics Failed: {resp.status_code}")

    print("\n✨ Verification Complete!")

if __name__ == "__main__":
    asyncio.run(run_verification())
