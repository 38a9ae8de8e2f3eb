from __future__ import annotations
from prometheus_client import Counter, Histogram

outbound_sends = Counter("conduit_outbound_sends_total", "Outbound payloads sent", ["channel"])
renders = Counter("conduit_renders_total", "Renderer invocations", ["renderer"])
delivery_errors = Counter("conduit_delivery_errors_total", "Failed outbound sends", ["channel"])
send_latency = Histogram("conduit_send_latency_seconds", "Outbound send latency seconds")
inbound_messages = Counter("conduit_inbound_messages_total", "Inbound channel messages recorded", ["channel"])
inbound_discarded = Counter("conduit_inbound_discarded_total", "Inbound events discarded", ["reason"])
