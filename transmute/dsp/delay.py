import torch

from transmute.dsp.filters import Filter


class DelayLine:
    def __init__(self, max_delay_samples: int, num_channels: int = 1):
        # Headroom so a full block can be read while max_delay_samples of history are kept
        self.buffer_size = int(max_delay_samples) + 4096
        self.num_channels = num_channels
        self.buffer = torch.zeros(num_channels, self.buffer_size, dtype=torch.float64)
        self.write_ptr = 0

    def reset(self):
        self.buffer.zero_()
        self.write_ptr = 0

    def write_block(self, input_block: torch.Tensor):
        """
        Write a (channels, count) block to the delay line.
        Updates write_ptr.
        """
        block_len = input_block.shape[-1]
        block = input_block.to(torch.float64)

        # Handle wrap-around writing
        end_ptr = self.write_ptr + block_len

        if end_ptr <= self.buffer_size:
            self.buffer[:, self.write_ptr:end_ptr] = block
        else:
            # Split write
            first_chunk = self.buffer_size - self.write_ptr
            self.buffer[:, self.write_ptr:] = block[:, :first_chunk]
            self.buffer[:, :end_ptr - self.buffer_size] = block[:, first_chunk:]

        self.write_ptr = end_ptr % self.buffer_size

    def read_block(self, delay_samples: float, count: int) -> torch.Tensor:
        """
        Read `count` samples starting delay_samples in the past, relative to the
        current write_ptr (read before writing the block at the same time).
        Uses linear interpolation for fractional delay. count must not exceed
        delay_samples or the read overtakes the write.
        """
        grid = torch.arange(count, dtype=torch.float64)
        read_centers = (self.write_ptr + grid) - delay_samples

        # y = x[floor] * (1-frac) + x[ceil] * frac
        indices_floor = torch.floor(read_centers).long()
        indices_ceil = indices_floor + 1
        frac = read_centers - indices_floor

        # Wrap indices
        indices_floor = indices_floor % self.buffer_size
        indices_ceil = indices_ceil % self.buffer_size

        sample_floor = self.buffer[:, indices_floor]
        sample_ceil = self.buffer[:, indices_ceil]

        return sample_floor * (1.0 - frac) + sample_ceil * frac


class FeedbackDelay:
    """
    Delay with a lowpass inside the feedback loop:
        z[n] = x[n-D] + feedback * y[n-D]
        y    = lowpass(z)
    y is the wet output. Processed in blocks of D samples so every read sees
    samples that are already written.
    """

    def __init__(self, sample_rate: int, delay_s: float, feedback: float, cutoff_hz: float, q: float = 0.707):
        self.sample_rate = sample_rate
        self.delay_samples = max(1, int(round(delay_s * sample_rate)))
        self.feedback = float(feedback)
        self.cutoff_hz = cutoff_hz
        self.q = q

    def process(self, signal: torch.Tensor) -> torch.Tensor:
        if signal.dim() == 1:
            signal = signal.unsqueeze(0)
        channels, n = signal.shape
        if n == 0:
            return signal.clone()

        d = self.delay_samples
        line = DelayLine(d, channels)
        z = torch.zeros(channels, n, dtype=torch.float64)
        y = torch.zeros(channels, n, dtype=torch.float64)
        x = signal.to(torch.float64)

        for start in range(0, n, d):
            end = min(start + d, n)
            z[:, start:end] = line.read_block(d, end - start)

            # The lowpass restarts one block back; its impulse response has died out
            # to float64 precision well within d samples, so the block matches a
            # continuous run.
            warm = max(0, start - d)
            filtered = Filter.lowpass(z[:, warm:end], self.sample_rate, self.cutoff_hz, self.q)
            y[:, start:end] = filtered[:, start - warm:]

            line.write_block(x[:, start:end] + self.feedback * y[:, start:end])

        return y.to(torch.float32)
