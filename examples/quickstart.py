# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

import logging
import sys
from pathlib import Path

# Add src to PYTHONPATH for local runs
sys.path.append(str(Path(__file__).resolve().parents[1] / "src"))

from ServiceBroker.Xml import BrokerConfig, BrokerError, InvocationRequest, XmlServiceBroker

logging.basicConfig(level=logging.INFO)

document = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).parent / "data" / "store.xml"
config = BrokerConfig(xml_file_path=str(document))

with XmlServiceBroker(config) as broker:
    print(f"Discovering {document}:")
    catalog = broker.describe_schema()
    for service_object in catalog:
        properties = ", ".join(
            f"{prop.name}:{prop.semantic_type.value}" for prop in service_object.properties
        )
        print(f"  {service_object.name} ({properties})")
        print(f"    methods: {', '.join(service_object.methods.names())}")

    print("\nCustomers whose name starts with 'An':")
    for record in broker.query.list("Customer", {"Name": "An"}):
        print(f"  {record['Name']} from {record['City']} since {record['Since']}")

    print("\nRead customer 'Bob':")
    bob = broker.query.read("Customer", "Bob").first()
    print(f"  {bob.to_dict() if bob else 'not found'}")

    print("\nOrders as a DataFrame:")
    print(broker.execute(InvocationRequest("ListOrder", "Order")).to_dataframe())

    response = broker.query.list("Customer", select=["Name"]).with_response_details()
    print(f"\nListed {response.telemetry['row_count']} customers in {response.telemetry['timing_ms']:.1f} ms")

    try:
        broker.query.read("Customer", "   ")
    except BrokerError as ex:
        print(f"\nExpected failure: {ex.code}/{ex.subcode}: {ex.message}")
