#!/usr/bin/env python3

# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""
REST API routes. One route per TV command; each returns the TV's response
payload as JSON.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from ..internal_types import *
from ..constants import DEFAULT_PREFIX
from ..client import WebOsTvClient

from .logger import logger

router = APIRouter()

def get_tv_client(request: Request) -> WebOsTvClient:
    return request.app.state.tv_client

class SendMessageBody(BaseModel):
    type: str
    uri: Optional[str] = None
    payload: Optional[Dict[str, Any]] = None
    prefix: str = DEFAULT_PREFIX

class VolumeBody(BaseModel):
    volume: int

class InputBody(BaseModel):
    inputId: str

class SoundOutputBody(BaseModel):
    output: str

class TextBody(BaseModel):
    text: str

class LaunchAppBody(BaseModel):
    appId: str

class MessageBody(BaseModel):
    message: str

class ToastIdBody(BaseModel):
    toastId: str

class AlertIdBody(BaseModel):
    alertId: str

class ChannelBody(BaseModel):
    channelId: str

class CalibrationBody(BaseModel):
    calibration: Dict[str, Any]

@router.post("/send-message", description="Send a raw message to the TV.")
async def send_message(body: SendMessageBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    frame = await client.send_message(body.type, body.uri, payload=body.payload, prefix=body.prefix)
    return frame.to_jsonable()

@router.get("/services", description="Get the list of services available on the TV.")
async def get_services(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_services()

@router.get("/volume", description="Get the current volume.")
async def get_volume(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_volume()

@router.post("/set-volume", description="Set the volume.")
async def set_volume(body: VolumeBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_volume(body.volume)

@router.post("/volume-up", description="Increase the volume.")
async def volume_up(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.volume_up()

@router.post("/volume-down", description="Decrease the volume.")
async def volume_down(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.volume_down()

@router.post("/mute", description="Mute or unmute the TV.")
async def mute(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.toggle_mute()

@router.get("/audio-status", description="Get volume, mute state and sound output.")
async def get_audio_status(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_audio_status()

@router.get("/sound-output", description="Get the current sound output device.")
async def get_sound_output(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return { "soundOutput": await client.get_sound_output() }

@router.post("/set-sound-output", description="Set the sound output device.")
async def set_sound_output(body: SoundOutputBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_sound_output(body.output)

@router.post("/audio-checker", description="Start keeping the sound output pinned to a device.")
async def audio_checker(body: SoundOutputBody, client: WebOsTvClient = Depends(get_tv_client)) -> str:
    error = await client.start_audio_checker(body.output)
    if error is not None:
        raise error
    logger.info(f"Audio checker started for {body.output}")
    return "OK"

@router.post("/stop-audio-checker", description="Stop the audio checker.")
async def stop_audio_checker(client: WebOsTvClient = Depends(get_tv_client)) -> str:
    await client.stop_audio_checker()
    logger.info("Audio checker stopped")
    return "OK"

@router.get("/current-app-info", description="Get the foreground app.")
async def get_current_app_info(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_current_app_info()

@router.get("/apps", description="List launch points.")
async def get_apps(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_apps()

@router.post("/launch-app", description="Launch an app.")
async def launch_app(body: LaunchAppBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.launch_app(body.appId)

@router.get("/app-state/{app_id}", description="Get the launcher state of an app.")
async def get_app_state(app_id: str, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_app_state(app_id)

@router.post("/close-launcher", description="Close the launcher.")
async def close_launcher(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.close_launcher()

@router.post("/close-web-app", description="Close the foreground web app.")
async def close_web_app(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.close_web_app()

@router.get("/inputs", description="List external inputs.")
async def get_inputs(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_inputs()

@router.post("/set-input", description="Switch to an external input.")
async def set_input(body: InputBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_input(body.inputId)

@router.get("/input-socket", description="Get the pointer input socket path.")
async def get_input_socket(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_input_socket()

@router.post("/send-enter", description="Send the enter key.")
async def send_enter(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.send_enter()

@router.post("/send-delete", description="Delete a character.")
async def send_delete(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.send_delete()

@router.post("/insert-text", description="Insert text in the input method.")
async def insert_text(body: TextBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.insert_text(body.text)

@router.post("/set-3d-on", description="Turn 3D mode on.")
async def set_3d_on(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_3d_on()

@router.post("/set-3d-off", description="Turn 3D mode off.")
async def set_3d_off(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_3d_off()

@router.get("/software-info", description="Get firmware information.")
async def get_software_info(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_software_info()

@router.get("/system-info", description="Get system information.")
async def get_system_info(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_system_info()

@router.get("/system-settings", description="Get picture settings.")
async def get_system_settings(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_system_settings()

@router.get("/configs", description="Get model configuration values.")
async def get_configs(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_configs()

@router.get("/list-devices", description="List attached storage devices.")
async def list_devices(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.list_devices()

@router.post("/media-play", description="Play.")
async def media_play(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.media_play()

@router.post("/media-stop", description="Stop.")
async def media_stop(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.media_stop()

@router.post("/media-pause", description="Pause.")
async def media_pause(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.media_pause()

@router.post("/media-rewind", description="Rewind.")
async def media_rewind(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.media_rewind()

@router.post("/media-fast-forward", description="Fast forward.")
async def media_fast_forward(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.media_fast_forward()

@router.post("/media-close", description="Close the media viewer.")
async def media_close(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.media_close()

@router.post("/toggle-power", description="Turn the TV off.")
async def toggle_power(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.toggle_power()

@router.post("/wake", description="Send a wake-on-LAN packet to the configured MAC address.")
async def wake(client: WebOsTvClient = Depends(get_tv_client)) -> str:
    await client.wake()
    return "OK"

@router.get("/power-state", description="Get the power state.")
async def get_power_state(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_power_state()

@router.post("/turn-off-screen", description="Turn the screen off.")
async def turn_off_screen(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.turn_off_screen()

@router.post("/turn-on-screen", description="Turn the screen on.")
async def turn_on_screen(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.turn_on_screen()

@router.post("/show-toast", description="Show a toast.")
async def show_toast(body: MessageBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.show_toast(body.message)

@router.post("/close-toast", description="Close a toast.")
async def close_toast(body: ToastIdBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.close_toast(body.toastId)

@router.post("/show-alert", description="Show an alert.")
async def show_alert(body: MessageBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.show_alert(body.message)

@router.post("/close-alert", description="Close an alert.")
async def close_alert(body: AlertIdBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.close_alert(body.alertId)

@router.post("/channel-up", description="Next channel.")
async def channel_up(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.channel_up()

@router.post("/channel-down", description="Previous channel.")
async def channel_down(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.channel_down()

@router.get("/channels", description="List channels.")
async def get_channels(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_channels()

@router.get("/channel-info/{channel_id}", description="Get program info for a channel.")
async def get_channel_info(channel_id: str, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_channel_info(channel_id)

@router.get("/current-channel", description="Get the current channel.")
async def get_current_channel(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_current_channel()

@router.post("/set-channel", description="Switch to a channel.")
async def set_channel(body: ChannelBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_channel(body.channelId)

@router.post("/take-screenshot", description="Capture the screen.")
async def take_screenshot(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.take_screenshot()

@router.get("/calibration", description="Get picture calibration data.")
async def get_calibration(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.get_calibration()

@router.post("/set-calibration", description="Set picture calibration data.")
async def set_calibration(body: CalibrationBody, client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.set_calibration(body.calibration)

@router.post("/show-input-picker", description="Show the input picker.")
async def show_input_picker(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.show_input_picker()

@router.post("/activate-screensaver", description="Activate the screensaver.")
async def activate_screensaver(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.activate_screensaver()

@router.post("/reboot", description="Reboot the TV.")
async def reboot(client: WebOsTvClient = Depends(get_tv_client)) -> Dict[str, Any]:
    return await client.reboot()
