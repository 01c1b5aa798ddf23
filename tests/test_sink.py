"""
Tests for the TCP connection sink
"""
import socket
import threading
from unittest.mock import MagicMock, patch

import pytest

from forwarder.sink import (
    ConnectionSink,
    SinkConnectionError,
    SinkWriteError,
    parse_address,
)


class TestParseAddress:
    """Test parse_address"""

    def test_host_port(self):
        assert parse_address('wavefront:2878') == ('wavefront', 2878)

    def test_ipv6(self):
        assert parse_address('[::1]:2878') == ('::1', 2878)

    @pytest.mark.parametrize('address', ['wavefront', ':2878', 'wavefront:', 'wavefront:abc'])
    def test_invalid(self, address):
        with pytest.raises(ValueError):
            parse_address(address)


class TestConnectionSink:
    """Test ConnectionSink"""

    def test_write_reaches_server(self, tcp_server):
        sink = ConnectionSink.connect(tcp_server.address, timeout=5)

        sink.write('cadvisor.rx_bytes 10 1 source=h container="c1"   \n')
        sink.write('cadvisor.tx_bytes 20 1 source=h container="c1"   \n')
        sink.close()

        assert tcp_server.done.wait(5)
        assert tcp_server.received.decode('utf-8').splitlines() == [
            'cadvisor.rx_bytes 10 1 source=h container="c1"   ',
            'cadvisor.tx_bytes 20 1 source=h container="c1"   ',
        ]

    def test_concurrent_writers_do_not_interleave(self, tcp_server):
        """Long lines written from many threads arrive whole and exactly once"""
        sink = ConnectionSink.connect(tcp_server.address, timeout=5)
        payload = 'x' * 20000
        expected = {
            f'cadvisor.writer_{t}_{n} {n} 1 source=h container="{payload}"   '
            for t in range(6) for n in range(20)
        }
        barrier = threading.Barrier(6)

        def writer(t):
            barrier.wait()
            for n in range(20):
                sink.write(f'cadvisor.writer_{t}_{n} {n} 1 source=h container="{payload}"   \n')

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(6)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        sink.close()

        assert tcp_server.done.wait(10)
        lines = tcp_server.received.decode('utf-8').splitlines()
        assert len(lines) == len(expected)
        assert set(lines) == expected

    def test_connect_refused(self):
        # Grab a free port, then close it so nothing listens there
        spare = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        spare.bind(('127.0.0.1', 0))
        port = spare.getsockname()[1]
        spare.close()

        with pytest.raises(SinkConnectionError):
            ConnectionSink.connect(f'127.0.0.1:{port}', timeout=1)

    def test_connect_bad_address(self):
        with pytest.raises(SinkConnectionError):
            ConnectionSink.connect('no-port-here')

    @patch('forwarder.sink.socket.create_connection')
    def test_connect_uses_timeout(self, mock_create):
        mock_sock = MagicMock()
        mock_create.return_value = mock_sock

        sink = ConnectionSink.connect('wavefront:2878', timeout=3)

        mock_create.assert_called_once_with(('wavefront', 2878), timeout=3)
        mock_sock.settimeout.assert_called_once_with(None)
        assert sink.address == 'wavefront:2878'

    def test_write_failure_raises(self):
        mock_sock = MagicMock()
        mock_sock.sendall.side_effect = BrokenPipeError('Broken pipe')
        sink = ConnectionSink(mock_sock, 'wavefront:2878')

        with pytest.raises(SinkWriteError):
            sink.write('line\n')

    def test_write_after_close_raises(self):
        mock_sock = MagicMock()
        sink = ConnectionSink(mock_sock, 'wavefront:2878')
        sink.close()

        with pytest.raises(SinkWriteError):
            sink.write('line\n')
        mock_sock.sendall.assert_not_called()

    def test_close_twice(self):
        mock_sock = MagicMock()
        sink = ConnectionSink(mock_sock)

        sink.close()
        sink.close()

        assert sink.closed
        mock_sock.close.assert_called_once()

    def test_write_encodes_utf8(self):
        mock_sock = MagicMock()
        sink = ConnectionSink(mock_sock)

        sink.write('cadvisor.rx_bytes 1 1 source=h container="café"   \n')

        mock_sock.sendall.assert_called_once_with(
            'cadvisor.rx_bytes 1 1 source=h container="café"   \n'.encode('utf-8')
        )
