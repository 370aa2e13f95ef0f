"""Controller endpoints. Everything registered here is call-logged."""
