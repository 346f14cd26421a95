"""
Local DNS responder for naming-system suffixes.

Answers every A query under a recognized suffix with a fixed loopback
address so that browsers send the request to the local HTTP proxy, which
performs the actual resolution. Names outside the suffixes get NXDOMAIN.
No recursion or forwarding is done.
"""

import asyncio
import struct
from typing import Optional

import dns.exception
import dns.flags
import dns.message
import dns.rcode
import dns.rdataclass
import dns.rdatatype
import dns.rrset

from .audit_logger import AuditLogger
from .config import ServerConfig
from .domain_validator import DomainValidator
from .enums import LogLevel


class DnsResponder:
    """Builds DNS responses from raw query packets."""

    def __init__(
        self,
        validator: DomainValidator,
        answer_address: str = "127.0.0.1",
        answer_ttl: int = 300,
    ) -> None:
        self._validator = validator
        self._answer_address = answer_address
        self._answer_ttl = answer_ttl

    def respond(self, query: dns.message.Message) -> dns.message.Message:
        """
        Build the response for a parsed query.

        A queries under a known suffix get one authoritative A record;
        other types under a known suffix get NOERROR with no answers;
        everything else gets NXDOMAIN.
        """
        response = dns.message.make_response(query)
        response.flags |= dns.flags.AA

        if not query.question:
            response.set_rcode(dns.rcode.FORMERR)
            return response

        question = query.question[0]
        name = question.name.to_text(omit_final_dot=True)

        if not self._validator.has_known_suffix(name):
            response.set_rcode(dns.rcode.NXDOMAIN)
            return response

        if question.rdtype == dns.rdatatype.A and question.rdclass == dns.rdataclass.IN:
            response.answer.append(
                dns.rrset.from_text(
                    question.name,
                    self._answer_ttl,
                    dns.rdataclass.IN,
                    dns.rdatatype.A,
                    self._answer_address,
                )
            )
        response.set_rcode(dns.rcode.NOERROR)
        return response

    def handle_packet(self, data: bytes) -> Optional[bytes]:
        """
        Answer a wire-format query.

        Returns:
            The wire-format response, or None if the packet is not a DNS query
        """
        try:
            query = dns.message.from_wire(data)
        except dns.exception.DNSException:
            return None
        return self.respond(query).to_wire()


class _UdpProtocol(asyncio.DatagramProtocol):
    def __init__(self, server: "DnsServer") -> None:
        self._server = server
        self.transport: Optional[asyncio.DatagramTransport] = None

    def connection_made(self, transport) -> None:
        self.transport = transport

    def datagram_received(self, data: bytes, addr) -> None:
        reply = self._server.responder.handle_packet(data)
        if reply is None:
            self._server.log_debug("Dropped malformed DNS packet", {"client": str(addr)})
            return
        assert self.transport is not None
        self.transport.sendto(reply, addr)


class DnsServer:
    """UDP and TCP listeners around a ``DnsResponder``."""

    COMPONENT = "dns_server"

    def __init__(
        self,
        config: ServerConfig,
        logger: Optional[AuditLogger] = None,
    ) -> None:
        self._config = config
        self._logger = logger
        self.responder = DnsResponder(
            DomainValidator(config.domain_suffixes),
            answer_address=config.answer_address,
            answer_ttl=config.answer_ttl,
        )
        self._udp_transport: Optional[asyncio.DatagramTransport] = None
        self._tcp_server: Optional[asyncio.AbstractServer] = None

    def log_debug(self, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(LogLevel.DEBUG, self.COMPONENT, message, data)

    async def _handle_tcp(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        # Each message is prefixed with a two-byte big-endian length
        try:
            while True:
                header = await reader.readexactly(2)
                (length,) = struct.unpack("!H", header)
                data = await reader.readexactly(length)
                reply = self.responder.handle_packet(data)
                if reply is None:
                    break
                writer.write(struct.pack("!H", len(reply)) + reply)
                await writer.drain()
        except (asyncio.IncompleteReadError, ConnectionError):
            pass
        finally:
            writer.close()

    async def start(self) -> None:
        """Bind the UDP and TCP listeners."""
        loop = asyncio.get_running_loop()
        host, port = self._config.dns_host, self._config.dns_port
        self._udp_transport, _ = await loop.create_datagram_endpoint(
            lambda: _UdpProtocol(self),
            local_addr=(host, port),
        )
        self._tcp_server = await asyncio.start_server(self._handle_tcp, host, port)
        if self._logger:
            self._logger.log(
                LogLevel.INFO,
                self.COMPONENT,
                "DNS server listening",
                {"host": host, "port": port, "suffixes": list(self._config.domain_suffixes)},
            )

    async def stop(self) -> None:
        """Close both listeners."""
        if self._udp_transport is not None:
            self._udp_transport.close()
            self._udp_transport = None
        if self._tcp_server is not None:
            self._tcp_server.close()
            await self._tcp_server.wait_closed()
            self._tcp_server = None
