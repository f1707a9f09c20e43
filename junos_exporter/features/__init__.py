"""Feature collectors: OSPF, routes, VRRP, VPWS, power, storage, subscribers, RPKI, RPM, security and system."""