from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from citypulse.main import app
from citypulse.services.report_source import InMemoryReportSource, set_report_source

now = datetime.now(timezone.utc)
set_report_source(InMemoryReportSource([
    {"id": f"demo-{i}", "description": "Heavy traffic jam near ITO", "aiTag": "Traffic",
     "location": "Delhi", "timestamp": (now - timedelta(minutes=i * 3)).isoformat()}
    for i in range(1, 5)
]))

client = TestClient(app)

print('ROOT:')
print(client.get('/').json())

print('\nHEALTH:')
print(client.get('/health').json())

print('\nSOURCE HEALTH:')
try:
    resp = client.get('/health/source')
    print(resp.status_code)
    try:
        print(resp.json())
    except Exception:
        print(resp.text)
except Exception as e:
    print('Source check raised exception:', e)

print('\nEVENTS:')
print(client.get('/events').json())

print('\nALERTS:')
print(client.get('/alerts').json())
